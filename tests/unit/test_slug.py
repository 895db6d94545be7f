"""Unit tests for slug derivation."""

import pytest

from conduit.kernel.content.slug import slugify


@pytest.mark.parametrize("title,slug", [
    ("Segfaults and You: When Raw Pointers Go Wrong", "segfaults-and-you-when-raw-pointers-go-wrong"),
    ("Why are DB Admins Always Shouting?", "why-are-db-admins-always-shouting"),
    ("Converting to Rust from C: It's as Easy as 1, 2, 3!", "converting-to-rust-from-c-its-as-easy-as-1-2-3"),
    ("  leading and   repeated   spaces ", "leading-and-repeated-spaces"),
    ('The "Quoted" Word', "the-quoted-word"),
    ("snake_case_title", "snake-case-title"),
    ("Café Crème", "café-crème"),
])
def test_slugify(title, slug):
    assert slugify(title) == slug
