"""Shared hypothesis strategies for Bindery property-based testing.

Provides reusable strategies that generate template inputs at two levels:

- **Lexer**: Plain text, arbitrary text and well-formed tag fragments
- **Data**: Small scopes whose keys match the generated identifiers

These are building blocks -- individual test modules compose them into
property-specific strategies.
"""

from __future__ import annotations

from hypothesis import strategies as st

# ---------------------------------------------------------------------------
# Lexer strategies
# ---------------------------------------------------------------------------

# Plain text that does NOT contain delimiter characters
plain_text = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs",),  # no surrogates
        blacklist_characters="{}\x00",
    ),
    min_size=0,
    max_size=200,
)

# Short plain text for fragment bodies
short_text = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",), blacklist_characters="{}\x00"),
    max_size=19,
)

# Identifiers safe to use as variable names (no helper names)
identifier = st.sampled_from(
    ["x", "y", "name", "title", "count", "item", "flag", "total", "user", "price"]
)

field_tag = identifier.map(lambda name: f"{{{{{name}}}}}")

# Arbitrary input that might stress the lexer (fuzz-like)
arbitrary_template_source = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)),
    min_size=0,
    max_size=300,
)

# Delimiter-heavy input: mostly braces, sigils and tag words
brace_soup = st.lists(
    st.sampled_from(
        ["{{", "}}", "#if ", "#each ", "#unless ", "/if", "/each", "/unless", "else", "x", " "]
    ),
    max_size=40,
).map("".join)


@st.composite
def well_formed_fragment(draw, depth: int = 0) -> str:
    """Balanced template text built from fields and blocks."""
    parts = []
    for _ in range(draw(st.integers(min_value=1, max_value=4))):
        choice = draw(st.integers(min_value=0, max_value=3 if depth < 3 else 1))
        if choice == 0:
            parts.append(draw(short_text))
        elif choice == 1:
            parts.append(draw(field_tag))
        else:
            tag = draw(st.sampled_from(["if", "unless", "each"]))
            name = draw(identifier)
            body = draw(well_formed_fragment(depth + 1))
            parts.append(f"{{{{#{tag} {name}}}}}{body}{{{{/{tag}}}}}")
    return "".join(parts)


# ---------------------------------------------------------------------------
# Data strategies
# ---------------------------------------------------------------------------

scalar = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-1000, max_value=1000),
    st.text(max_size=10),
)

scope = st.dictionaries(
    identifier,
    st.one_of(scalar, st.lists(scalar, max_size=3)),
    max_size=6,
)
