import random

import pytest

from onix_deploy.credentials import HEX_ALPHABET, PASSWORD_ALPHABET, CredentialGenerator


class TestCredentialGenerator:
    def test_password_is_twelve_characters_from_alphabet(self, credentials):
        password = credentials.password()

        assert len(password) == 12
        assert set(password) <= set(PASSWORD_ALPHABET)

    def test_consecutive_passwords_differ(self, credentials):
        passwords = [credentials.password() for _ in range(20)]

        assert len(set(passwords)) == 20

    def test_seeded_generators_are_reproducible(self):
        first = CredentialGenerator(random.Random(7))
        second = CredentialGenerator(random.Random(7))

        assert [first.password() for _ in range(3)] == [second.password() for _ in range(3)]

    def test_default_generator_uses_system_randomness(self):
        generator = CredentialGenerator()

        assert len(generator.password()) == 12
        assert generator.password() != generator.password()

    def test_hex_token(self, credentials):
        token = credentials.hex_token()

        assert len(token) == 12
        assert set(token) <= set(HEX_ALPHABET)

    def test_custom_length(self, credentials):
        assert len(credentials.password(32)) == 32

    @pytest.mark.parametrize("length", [0, -1])
    def test_non_positive_length_rejected(self, credentials, length):
        with pytest.raises(ValueError):
            credentials.password(length)

    def test_alphabet_mixes_character_classes(self):
        assert any(c.isupper() for c in PASSWORD_ALPHABET)
        assert any(c.islower() for c in PASSWORD_ALPHABET)
        assert any(c.isdigit() for c in PASSWORD_ALPHABET)
        assert any(not c.isalnum() for c in PASSWORD_ALPHABET)
