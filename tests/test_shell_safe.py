"""Tests for tools/shell_safe.py: quoting of substituted values."""
import shlex

import pytest

from tools.shell_safe import MASK, render_command


class TestRenderCommand:
    @pytest.mark.parametrize("name", [
        "plain.png",
        "with space.png",
        "quote'in.jpg",
        "$(rm -rf ~).gif",
        "semi;colon`tick`.wav",
    ])
    def test_value_is_one_word(self, name):
        command = render_command("file -b {file}", file=f"/tmp/{name}")
        assert shlex.split(command) == ["file", "-b", f"/tmp/{name}"]

    def test_template_text_verbatim(self):
        command = render_command("xxd {file} | head -n 100", file="a b")
        assert command == "xxd 'a b' | head -n 100"

    def test_non_string_values(self, tmp_path):
        command = render_command("cat {file}", file=tmp_path / "x y")
        assert shlex.split(command)[1] == str(tmp_path / "x y")


class TestMaskedRender:
    def test_mask_replaces_password_argument_only(self):
        template = "steghide extract -sf {file} -p {password} -xf {out}"
        shown = render_command(template, file="/cases/evidence.jpg", password=MASK, out="steghide_extracted_1.bin")
        assert shlex.split(shown) == ["steghide", "extract", "-sf", "/cases/evidence.jpg",
                                      "-p", MASK, "-xf", "steghide_extracted_1.bin"]
