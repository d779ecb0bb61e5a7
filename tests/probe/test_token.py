import random
import re
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[2]))

import pytest
from pydantic import ValidationError

from traversal_probe import probe, schemas


def test_to_base36_renders_integer_and_fraction():
    assert probe.to_base36(1.5, 3) == "1.i00"
    assert probe.to_base36(36.25, 2) == "10.90"
    assert probe.to_base36(0.0, 1) == "0.0"


def test_to_base36_rejects_negative_values():
    with pytest.raises(ValueError):
        probe.to_base36(-0.5, 4)


def test_generated_token_is_short_lowercase_base36():
    for seed in range(50):
        token = probe.generate_token(random.Random(seed))
        assert len(token) == probe.TOKEN_LENGTH
        assert re.fullmatch(r"[0-9a-z]+", token)


def test_generated_token_is_reproducible_for_a_seeded_source():
    assert probe.generate_token(random.Random(42)) == probe.generate_token(random.Random(42))


def test_token_is_taken_from_the_fraction_digits():
    class _Fixed:
        def random(self):
            return 0.5

    # 1.5 renders as "1.i" followed by zeros; the slice starts past the "i".
    assert probe.generate_token(_Fixed()) == "00000"


def test_upload_form_targets_parent_directory():
    form = schemas.build_upload_form("k3x9a")
    assert form.name == "../k3x9a.txt"
    assert form.content == "k3x9a"
    assert list(form.as_form().items()) == [("name", "../k3x9a.txt"), ("content", "k3x9a")]


def test_upload_form_rejects_mismatched_name():
    with pytest.raises(ValidationError):
        schemas.UploadForm(name="k3x9a.txt", content="k3x9a")
    with pytest.raises(ValidationError):
        schemas.UploadForm(name="../other.txt", content="k3x9a")


def test_read_target_has_no_traversal_prefix():
    target = schemas.build_read_target("k3x9a")
    assert target.path == "/file/k3x9a.txt"
    assert "../" not in target.path


@pytest.mark.parametrize("token", ["", "ABC", "a/b", "../x"])
def test_invalid_tokens_are_rejected(token):
    with pytest.raises(ValidationError):
        schemas.build_read_target(token)
    with pytest.raises(ValidationError):
        schemas.build_upload_form(token)
