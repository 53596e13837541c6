"""
Tests for the placeholder substitution engine.
"""

import re
from unittest.mock import patch

from neptune.models import GameMode, Realm
from neptune.substitution import (
    apply,
    build_namespace,
    Replacer,
    normalize_key,
    realm_namespace,
    substitute,
    substitute_file,
    token,
)

from conftest import write


def make_realm(gm_attrs=None, realm_attrs=None):
    gm = GameMode(id="skyblock", name="Skyblock", server="paper", version="1.20",
                  attributes=gm_attrs or {})
    return Realm(id="survival", name="Survival", gamemode=gm, attributes=realm_attrs or {})


class TestKeys:
    def test_normalize_key(self):
        assert normalize_key("max-players") == "MAX_PLAYERS"
        assert normalize_key("Gamemode_Name") == "GAMEMODE_NAME"

    def test_token(self):
        assert token("max-players") == "$$REALM_MAX_PLAYERS$$"


class TestNamespace:
    def test_layers_and_prefixes(self):
        ns = realm_namespace(make_realm({"motd": "hello"}, {"difficulty": "hard"}))
        assert ns == {
            "GAMEMODE_ID": "skyblock",
            "GAMEMODE_NAME": "Skyblock",
            "GAMEMODE_SERVER": "paper",
            "GAMEMODE_VERSION": "1.20",
            "GAMEMODE_MOTD": "hello",
            "ID": "survival",
            "NAME": "Survival",
            "DIFFICULTY": "hard",
        }

    def test_realm_attribute_beats_gamemode_attribute(self):
        """`gamemode-motd` on the realm and `motd` on the gamemode share one token."""
        ns = realm_namespace(make_realm({"motd": "from gamemode"}, {"gamemode-motd": "from realm"}))
        assert ns["GAMEMODE_MOTD"] == "from realm"

    def test_realm_attribute_beats_identity_fields(self):
        ns = realm_namespace(make_realm(realm_attrs={"gamemode_version": "1.21", "id": "other"}))
        assert ns["GAMEMODE_VERSION"] == "1.21"
        assert ns["ID"] == "other"

    def test_case_and_hyphen_collisions_last_wins(self):
        ns = build_namespace({"Max-Players": "10"}, {"max_players": "20"})
        assert ns == {"MAX_PLAYERS": "20"}

    def test_server_jar_key_is_reserved(self):
        """The launch-script path is filled per run directory; attributes cannot claim it."""
        ns = realm_namespace(make_realm({"server-jar": "gm.jar"}, {"server_jar": "custom.jar"}))
        assert "SERVER_JAR" not in ns
        assert apply("java -jar $$REALM_SERVER_JAR$$", ns) == "java -jar $$REALM_SERVER_JAR$$"


class TestApply:
    def test_replaces_every_occurrence(self):
        assert apply("$$REALM_ID$$/$$REALM_ID$$", {"ID": "x"}) == "x/x"

    def test_unknown_tokens_left_alone(self):
        text = "a=$$REALM_NOPE$$"
        assert apply(text, {"ID": "x"}) == text

    def test_values_are_not_expanded_again(self):
        out = apply("$$REALM_A$$ $$REALM_B$$", {"A": "$$REALM_B$$", "B": "b"})
        assert out == "$$REALM_B$$ b"

    def test_no_expression_evaluation(self):
        text = "$$REALM_ID + 1$$ ${ID} {{ id }}"
        assert apply(text, {"ID": "x"}) == text

    def test_empty_namespace(self):
        assert apply("$$REALM_ID$$", {}) == "$$REALM_ID$$"


class TestSubstituteTree:
    def test_rewrites_text_files_only(self, tmp_path):
        props = write(tmp_path / "server.properties", "motd=$$REALM_NAME$$\n")
        nested = write(tmp_path / "plugins" / "Essentials" / "config.yml", "name: $$REALM_NAME$$\n")
        blob = write(tmp_path / "world" / "level.dat", "$$REALM_NAME$$")
        jar = write(tmp_path / "server.jar", "$$REALM_NAME$$")

        changed = substitute(tmp_path, {"NAME": "Survival"})

        assert changed == 2
        assert props.read_text() == "motd=Survival\n"
        assert nested.read_text() == "name: Survival\n"
        assert blob.read_text() == "$$REALM_NAME$$"
        assert jar.read_text() == "$$REALM_NAME$$"

    def test_extension_match_is_case_insensitive(self, tmp_path):
        f = write(tmp_path / "README.TXT", "$$REALM_ID$$")
        substitute(tmp_path, {"ID": "r"})
        assert f.read_text() == "r"

    def test_second_pass_is_a_no_op(self, tmp_path):
        f = write(tmp_path / "a.yml", "id: $$REALM_ID$$\nname: $$REALM_NAME$$\n")
        ns = {"ID": "survival", "NAME": "Survival"}

        assert substitute(tmp_path, ns) == 1
        first = f.read_text()
        assert substitute(tmp_path, ns) == 0
        assert f.read_text() == first

    def test_realm_value_wins_in_output(self, tmp_path):
        f = write(tmp_path / "motd.txt", "$$REALM_GAMEMODE_MOTD$$")
        realm = make_realm({"motd": "gamemode says"}, {"GAMEMODE-MOTD": "realm says"})

        substitute(tmp_path, realm_namespace(realm))
        assert f.read_text() == "realm says"

    def test_line_endings_and_undecodable_bytes_preserved(self, tmp_path):
        f = tmp_path / "legacy.cfg"
        f.write_bytes(b"name=$$REALM_NAME$$\r\nlabel=caf\xe9\r\n")

        assert substitute_file(f, {"NAME": "S"}) is True
        assert f.read_bytes() == b"name=S\r\nlabel=caf\xe9\r\n"

    def test_unchanged_file_not_rewritten(self, tmp_path):
        f = write(tmp_path / "plain.txt", "nothing here")
        assert substitute_file(f, {"NAME": "S"}) is False

    def test_pattern_compiled_once_per_pass(self, tmp_path):
        for i in range(3):
            write(tmp_path / f"f{i}.yml", "id: $$REALM_ID$$\n")

        with patch("neptune.substitution.re.compile", wraps=re.compile) as compile_spy:
            assert substitute(tmp_path, {"ID": "survival", "NAME": "Survival"}) == 3
        assert compile_spy.call_count == 1

    def test_replacer_reusable_across_files(self, tmp_path):
        a = write(tmp_path / "a.txt", "$$REALM_ID$$")
        b = write(tmp_path / "b.txt", "$$REALM_ID$$!")
        replacer = Replacer({"ID": "r"})

        assert substitute_file(a, replacer) and substitute_file(b, replacer)
        assert (a.read_text(), b.read_text()) == ("r", "r!")
