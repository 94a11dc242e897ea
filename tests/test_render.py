# Copyright 2024 TuiChat contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import re
import unittest

from tuichat.core.render import (
    BOLD,
    CYAN,
    RESET,
    ZERO_WIDTH_MARKER,
    colorize,
    markdown_to_ansi,
    render_transcript,
    wordwrap,
    wrap_width,
)
from tuichat.core.transcript import reply_entry, user_entry

ANSI_RE = re.compile(r'\033\[[0-9;]*m')


def strip_ansi(text):
    return ANSI_RE.sub('', text)


class WordwrapTests(unittest.TestCase):
    def test_wraps_at_word_boundaries(self):
        text = "the quick brown fox jumps over the lazy dog"
        wrapped = wordwrap(text, 10)
        for line in wrapped.split('\n'):
            self.assertLessEqual(len(line), 10)
        self.assertEqual(wrapped.replace('\n', ' '), text)

    def test_preserves_existing_breaks_and_blank_lines(self):
        self.assertEqual(wordwrap("one\n\ntwo", 20), "one\n\ntwo")

    def test_long_words_are_not_split(self):
        word = "x" * 30
        self.assertEqual(wordwrap(f"a {word} b", 10), f"a\n{word}\nb")

    def test_rewrapping_is_stable(self):
        text = "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor."
        once = wordwrap(text, 25)
        self.assertEqual(wordwrap(once, 25), once)

    def test_wrap_width_reserves_margin(self):
        self.assertEqual(wrap_width(80), 77)
        self.assertEqual(wrap_width(2), 1)


class ColorizeTests(unittest.TestCase):
    def test_each_line_is_coloured_separately(self):
        result = colorize("a\nb", "#ff0000")
        self.assertEqual(
            result,
            "\033[38;2;255;0;0ma\033[0m\n\033[38;2;255;0;0mb\033[0m",
        )

    def test_empty_lines_and_empty_colour(self):
        self.assertEqual(colorize("a\n\nb", "#000000").split('\n')[1], "")
        self.assertEqual(colorize("plain", ""), "plain")


class MarkdownTests(unittest.TestCase):
    def test_headers_bold_and_code(self):
        self.assertEqual(markdown_to_ansi("# Title"), f"{BOLD}Title{RESET}")
        self.assertEqual(markdown_to_ansi("a **b** c"), f"a {BOLD}b{RESET} c")
        self.assertEqual(markdown_to_ansi("run `ls`"), f"run {CYAN}ls{RESET}")

    def test_reapplying_is_stable(self):
        text = "# Heading\nsome **bold** and `code`\n\nplain"
        once = markdown_to_ansi(text)
        self.assertEqual(markdown_to_ansi(once), once)

    def test_header_after_colour_code(self):
        styled = colorize("## Section", "#123456")
        self.assertIn(f"{BOLD}Section{RESET}", markdown_to_ansi(styled))


class RenderTranscriptTests(unittest.TestCase):
    def test_ends_with_marker_and_joins_entries(self):
        entries = [user_entry("hello", 77), reply_entry("hi", 77)]
        content = render_transcript(entries)
        self.assertTrue(content.endswith('\n' + ZERO_WIDTH_MARKER))
        lines = [strip_ansi(line) for line in content.split('\n')]
        self.assertEqual(lines, ["> hello", "> hi", ZERO_WIDTH_MARKER])

    def test_rendering_is_deterministic(self):
        entries = [user_entry("**bold** question", 77), reply_entry("`code` answer", 77)]
        self.assertEqual(render_transcript(entries), render_transcript(list(entries)))

    def test_empty_transcript_renders_marker_line(self):
        self.assertEqual(render_transcript([]), '\n' + ZERO_WIDTH_MARKER)

    def test_custom_renderer(self):
        entries = [reply_entry("**kept**", 77)]
        content = render_transcript(entries, renderer=lambda text: text)
        self.assertIn("**kept**", content)


if __name__ == "__main__":
    unittest.main()
