"""
Tests for the key generation command.
"""

from unittest.mock import MagicMock, patch

import pytest


class TestGenerateKeys:
    """Tests for scripts.generate_keys.generate_keys()."""

    def test_generates_keys_when_missing(self, empty_key_store, capsys):
        from scripts.generate_keys import generate_keys

        exit_code = generate_keys(empty_key_store)

        assert exit_code == 0
        assert empty_key_store.keys_exist() is True
        assert "Keys generated successfully" in capsys.readouterr().out

    def test_existing_keys_declined_keeps_old_keys(self, key_store, key_pair, capsys):
        """Test that declining the confirmation prompt leaves the keys untouched."""
        from scripts.generate_keys import generate_keys

        prompt = MagicMock(return_value="n")

        exit_code = generate_keys(key_store, input_func=prompt)

        assert exit_code == 0
        prompt.assert_called_once()
        assert "invalidate" in prompt.call_args[0][0]
        assert key_store.load_private_key() == key_pair.private_key
        assert "Operation cancelled" in capsys.readouterr().out

    def test_existing_keys_confirmed_regenerates(self, key_store, key_pair):
        from scripts.generate_keys import generate_keys

        exit_code = generate_keys(key_store, input_func=lambda _: "yes")

        assert exit_code == 0
        assert key_store.load_private_key() != key_pair.private_key

    def test_force_skips_confirmation(self, key_store, key_pair):
        from scripts.generate_keys import generate_keys

        prompt = MagicMock()

        exit_code = generate_keys(key_store, force=True, input_func=prompt)

        assert exit_code == 0
        prompt.assert_not_called()
        assert key_store.load_private_key() != key_pair.private_key

    def test_eof_at_prompt_is_treated_as_no(self, key_store, key_pair):
        from scripts.generate_keys import generate_keys

        def closed_stdin(_):
            raise EOFError

        assert generate_keys(key_store, input_func=closed_stdin) == 0
        assert key_store.load_private_key() == key_pair.private_key

    def test_generation_failure_returns_error_code(self, empty_key_store, capsys):
        from core.keystore import CryptoProviderError
        from scripts.generate_keys import generate_keys

        with patch(
            "scripts.generate_keys.generate_key_pair",
            side_effect=CryptoProviderError("provider unavailable"),
        ):
            exit_code = generate_keys(empty_key_store)

        assert exit_code == 1
        assert empty_key_store.keys_exist() is False
        assert "provider unavailable" in capsys.readouterr().err


class TestMain:
    """Tests for the command line entry point."""

    def test_force_flag(self, empty_key_store):
        from scripts import generate_keys as script

        with patch.object(script, "get_key_store", return_value=empty_key_store), patch.object(
            script, "generate_keys", return_value=0
        ) as run:
            assert script.main(["--force"]) == 0

        assert run.call_args.kwargs["force"] is True
        assert run.call_args.kwargs["key_size"] == 2048

    def test_unknown_flag_exits(self):
        from scripts import generate_keys as script

        with pytest.raises(SystemExit):
            script.main(["--rotate"])
