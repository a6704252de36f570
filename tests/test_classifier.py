"""Tests for the content classifier."""

import pytest

from clipedia.core.clipboard.classifier import (
    LANGUAGE_PRIORITY,
    SYSTEM_TAGS,
    ContentClassifier,
    classify,
)


class TestUrl:
    @pytest.mark.parametrize("text", [
        "https://github.com",
        "http://example.com/path",
        "https://x.y/z?q=1&r=2#frag",
        "http://a",
        "  https://padded.example.com  ",
    ])
    def test_detects_urls(self, text):
        assert "url" in classify(text)

    @pytest.mark.parametrize("text", [
        "not a url",
        "ftp://files.example.com",
        "see https://example.com for details",
        "https://example.com/a b",
    ])
    def test_rejects_non_urls(self, text):
        assert "url" not in classify(text)

    def test_plain_url_has_only_url_tag(self):
        assert classify("https://github.com") == ["url"]


class TestEmail:
    def test_detects_email(self):
        assert "email" in classify("test@example.com")

    def test_trims_whitespace(self):
        assert "email" in classify("\n first.last+tag@mail.example.org \n")

    def test_rejects_text(self):
        assert "email" not in classify("not an email")
        assert "email" not in classify("write to test@example.com today")


class TestPhone:
    @pytest.mark.parametrize("text", [
        "+1 (555) 123-4567",
        "555 1234",
        "03-1234-5678",
    ])
    def test_detects_phone_numbers(self, text):
        assert "phone" in classify(text)

    @pytest.mark.parametrize("text", ["123-45", "12-34 56", "(555)", "+123456"])
    def test_requires_seven_digits(self, text):
        assert "phone" not in classify(text)

    def test_rejects_letters(self):
        assert "phone" not in classify("555-CALL-NOW")


class TestPath:
    @pytest.mark.parametrize("text", [
        "C:\\Users\\me\\file.txt",
        "D:/data/report.csv",
        "/usr/bin/env",
        "~/notes.txt",
    ])
    def test_detects_paths(self, text):
        assert "path" in classify(text)

    def test_rejects_relative_path(self):
        assert "path" not in classify("usr/bin/env")


class TestJson:
    def test_object(self):
        assert "json" in classify('{"a": 1}')

    def test_array(self):
        assert "json" in classify("  [1, 2, 3]\n")

    def test_structural_guess_only(self):
        # Not valid JSON, but the brackets match
        assert "json" in classify("{not: json}")

    def test_unbalanced(self):
        assert "json" not in classify('{"a": 1')
        assert "json" not in classify("[1, 2}")


class TestMarkdown:
    @pytest.mark.parametrize("text", [
        "# Title\nbody",
        "some **bold** text",
        "some *italic* text",
        "see [docs](https://example.com)",
        "- item one\n- item two",
        "```\nblock\n```",
    ])
    def test_detects_markdown(self, text):
        assert "markdown" in classify(text)

    def test_plain_sentence(self):
        assert "markdown" not in classify("plain sentence")

    def test_heading_needs_space(self):
        assert "markdown" not in classify("#hashtag")

    @pytest.mark.parametrize("text", ["intro\n## Section", "notes\n- item"])
    def test_heading_and_list_only_at_start_of_content(self, text):
        assert "markdown" not in classify(text)


class TestCode:
    def test_single_keyword_prose_is_not_code(self):
        assert "code" not in classify("if it rains, we stay")

    def test_two_pattern_classes_make_code(self):
        tags = classify("const x = 1;")
        assert "code" in tags
        # One javascript idiom is not enough for a language tag
        assert not any(t.startswith("code:") for t in tags)

    def test_rust(self):
        tags = classify("fn main() { let mut x = 1; }")
        assert "code" in tags
        assert "code:rust" in tags

    def test_javascript(self):
        tags = classify("const add = (a, b) => {\n  return a + b;\n};")
        assert "code:javascript" in tags

    def test_typescript(self):
        tags = classify("const n: number = 1;\ninterface Point { x: number }")
        assert "code:typescript" in tags

    def test_python(self):
        tags = classify("import os\n\ndef greet(name):\n    return 'hi ' + name\n")
        assert "code:python" in tags

    def test_java(self):
        tags = classify("public class Main {\n  private int x;\n}")
        assert "code:java" in tags

    def test_go(self):
        tags = classify('package main\n\nimport "fmt"\n\nfunc main() {\n\tx := 1\n}')
        assert "code:go" in tags

    def test_priority_breaks_ties(self):
        content = (
            "fn compute() {}\n"
            "let mut total = 0;\n"
            "const limit = 5;\n"
            "promise.then(done);"
        )
        tags = classify(content)
        assert "code:rust" in tags
        assert "code:javascript" not in tags

    def test_at_most_one_language(self):
        content = "fn a() {}\nlet mut b = 1;\nconst c = 2;\nx.then(y);\n#include <vector>\nstd::move(v);"
        assert len([t for t in classify(content) if t.startswith("code:")]) == 1

    def test_language_tag_follows_code(self):
        tags = classify("fn main() { let mut x = 1; }")
        assert tags.index("code:rust") == tags.index("code") + 1

    def test_priority_order(self):
        assert LANGUAGE_PRIORITY == (
            "rust", "javascript", "typescript", "python", "java", "go", "cpp", "csharp",
        )


class TestClassify:
    def test_empty_content(self):
        assert classify("") == []
        assert classify("   \n\t") == []

    def test_deterministic(self):
        content = "# Notes\n- see https://example.com\n```\nconst a = 1;\n```"
        assert classify(content) == classify(content)

    def test_no_duplicates(self):
        tags = classify("fn main() { let mut x = 1; }")
        assert len(tags) == len(set(tags))

    def test_path_to_json_file_is_not_json(self):
        tags = classify("/home/me/config.json")
        assert "path" in tags
        assert "json" not in tags

    def test_tags_come_from_vocabulary(self):
        samples = [
            "https://github.com", "a@b.io", "+1 555 123 4567", "~/x",
            '{"k": [1]}', "**hi**", "fn main() { let mut x = 1; }",
        ]
        for sample in samples:
            for tag in classify(sample):
                assert tag.split(":")[0] in SYSTEM_TAGS

    def test_class_and_function_agree(self):
        content = "public class Main { private int x; }"
        assert ContentClassifier.classify(content) == classify(content)
