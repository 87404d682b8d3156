"""Tests for segment() – splitting documents into comment/vars/query/fragments."""

import pytest

from gqlallow.errors import MalformedQueryError
from gqlallow.segmenter import Region, Token, fragment_name, segment, tokenize, transition
from tests.conftest import USER_DOC


# ---------------------------------------------------------------------------
# tokenize / transition
# ---------------------------------------------------------------------------

class TestTokenize:
    def test_comments_are_tokens(self):
        toks = list(tokenize("# note\nquery"))
        assert toks == [
            Token("comment", "# note", 0, 6),
            Token("name", "query", 7, 12),
        ]

    def test_block_comment_and_string(self):
        kinds = [t.kind for t in tokenize('/* a { */ "query" 12')]
        assert kinds == ["comment", "string", "number"]

    def test_unterminated_block_comment(self):
        with pytest.raises(MalformedQueryError, match="unterminated comment"):
            list(tokenize("query A { a } /* open"))

    def test_unterminated_string(self):
        with pytest.raises(MalformedQueryError, match="unterminated string"):
            list(tokenize('query A { a(x: "abc) }'))


class TestTransition:
    @pytest.mark.parametrize(("word", "region"), [
        ("variables", Region.VARIABLES),
        ("query", Region.QUERY),
        ("mutation", Region.QUERY),
        ("subscription", Region.QUERY),
        ("fragment", Region.FRAGMENT),
    ])
    def test_triggers(self, word, region):
        assert transition(Token("name", word, 0, len(word))) is region

    def test_non_trigger_name(self):
        assert transition(Token("name", "user", 0, 4)) is None

    def test_keyword_in_string_is_not_a_trigger(self):
        assert transition(Token("string", '"query"', 0, 7)) is None


# ---------------------------------------------------------------------------
# segment
# ---------------------------------------------------------------------------

class TestSegment:
    def test_query_and_fragment(self):
        item = segment(
            "query GetUser { user(id: $id) { name } } fragment UserFields on User { name }"
        )
        assert item.query == "query GetUser { user(id: $id) { name } }"
        assert len(item.fragments) == 1
        assert item.fragments[0].name == "UserFields"
        assert item.fragments[0].value == "fragment UserFields on User { name }"

    def test_full_document(self):
        item = segment(USER_DOC)
        assert item.comment == "# Look up a user by id"
        assert item.vars == '{\n  "id": 1  // any id works\n}'
        assert item.query.startswith("query GetUser($id: ID!) {")
        assert item.query.endswith("...UserFields\n  }\n}")
        assert [f.name for f in item.fragments] == ["UserFields"]
        assert item.fragments[0].value == "fragment UserFields on User {\n  id\n  name\n}"

    def test_regions_in_any_order(self):
        item = segment(
            "fragment F on User { name }\n"
            "query Q { user { ...F } }\n"
            'variables { "a": 1 }\n'
        )
        assert item.query == "query Q { user { ...F } }"
        assert item.vars == '{ "a": 1 }'
        assert item.fragments[0].value == "fragment F on User { name }"

    def test_multiple_fragments_keep_order(self):
        item = segment(
            "query Q { a { ...A ...B } }\n"
            "fragment A on T { x }\n"
            "fragment B on T { y }"
        )
        assert [f.name for f in item.fragments] == ["A", "B"]

    def test_field_named_like_a_keyword_does_not_split(self):
        doc = 'query Search { query(text: "x") { id } variables { a } }'
        assert segment(doc).query == doc

    def test_argument_named_like_a_keyword_does_not_split(self):
        doc = "query Q($fragment: ID) { node(id: $fragment) { id } }"
        assert segment(doc).query == doc

    def test_keyword_inside_comment_does_not_split(self):
        item = segment("# this query is cached\nquery A { a }")
        assert item.comment == "# this query is cached"
        assert item.query == "query A { a }"

    def test_trailing_text_after_closing_brace_is_dropped(self):
        item = segment("query A { a }   # trailing note\n\n")
        assert item.query == "query A { a }"

    def test_braces_inside_strings_are_ignored(self):
        doc = 'query A { a(t: """has } brace""") }'
        assert segment(doc).query == doc

    def test_mutation(self):
        item = segment("mutation AddUser { addUser(name: \"x\") { id } }")
        assert item.query.startswith("mutation AddUser")

    def test_anonymous_shorthand(self):
        assert segment("{ me { id } }").query == "{ me { id } }"

    def test_anonymous_operation_segments(self):
        item = segment("query { me { id } }")
        assert item.query == "query { me { id } }"
        assert item.name == ""

    def test_comment_only(self):
        item = segment("# just a note")
        assert item.comment == "# just a note"
        assert item.query == ""
        assert item.fragments == []

    def test_variables_only(self):
        item = segment('variables { "id": 2 }')
        assert item.vars == '{ "id": 2 }'
        assert item.query == ""

    def test_key_is_lowercase_name(self):
        item = segment("query GetUser { a }")
        item.name = "GetUser"
        assert item.key == "getuser"


class TestSegmentErrors:
    def test_unclosed_query(self):
        with pytest.raises(MalformedQueryError, match="no closing brace"):
            segment("query A { a ")

    def test_variables_without_body(self):
        with pytest.raises(MalformedQueryError):
            segment("query A { a } variables")

    def test_two_operations(self):
        with pytest.raises(MalformedQueryError, match="more than one operation"):
            segment("query A { a } query B { b }")

    def test_nameless_fragment(self):
        with pytest.raises(MalformedQueryError, match="fragment has no name"):
            segment("query A { a } fragment on User { a }")


class TestIdempotence:
    @pytest.mark.parametrize("doc", [
        USER_DOC,
        "query GetUser { user(id: $id) { name } } fragment UserFields on User { name }",
        'variables {"x": [1, 2]}\nsubscription Watch { events { id } } # tail',
        "fragment F on T { a }\nquery Q { t { ...F } }",
    ])
    def test_segmenting_the_query_again_is_stable(self, doc):
        first = segment(doc).query
        assert segment(first).query == first


class TestFragmentName:
    def test_name_after_keyword(self):
        assert fragment_name("fragment UserFields on User { name }") == "UserFields"

    def test_leading_whitespace(self):
        assert fragment_name("\n  fragment  F on T { a }") == "F"

    def test_missing_name(self):
        with pytest.raises(MalformedQueryError):
            fragment_name("fragment on User { a }")
