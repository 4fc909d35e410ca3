"""Naming helpers shared by the schema builder and the templates.

Conventions:
  underscore("Blog.Post")    -> "blog/post"
  underscore("BlogPosts")    -> "blog_posts"
  camelize("blog_posts")     -> "BlogPosts"
  camelize("admin/users")    -> "Admin.Users"
  humanize("blog_posts")     -> "Blog Posts"
  humanize("author_id")      -> "Author"

Plural names are valid only when they are already in underscore form,
so "blog_posts" passes while "BlogPosts" and "blog-posts" do not.
"""

from __future__ import annotations

import re

# Capitalized dotted identifier chain, e.g. Blog.Post or Accounts.User2
_MODULE_RE = re.compile(r"^[A-Z][A-Za-z0-9_]*(\.[A-Z][A-Za-z0-9_]*)*$")


def underscore(value: str) -> str:
    """Convert CamelCase to snake_case, turning `.` into `/` and `-` into `_`."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", value)
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1)
    return s2.replace(".", "/").replace("-", "_").lower()


def camelize(value: str) -> str:
    """Convert snake_case to CamelCase, turning `/` into `.`."""
    segments = []
    for segment in value.split("/"):
        segments.append("".join(word[:1].upper() + word[1:] for word in segment.split("_")))
    return ".".join(segments)


def humanize(value: str) -> str:
    """Produce display text: underscores become spaces, each word capitalized.

    A trailing `_id` is dropped first so foreign keys read as the thing
    they point at, and repeated underscores do not produce empty words.
    """
    if value.endswith("_id"):
        value = value[:-3]
    words = [w for w in value.split("_") if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


def valid_module_name(value: str) -> bool:
    """Check for a capitalized dotted identifier chain."""
    return _MODULE_RE.fullmatch(value) is not None


def valid_plural_name(value: str) -> bool:
    """Check the plural has no `:` or line breaks and is already underscored."""
    if ":" in value or "\n" in value or "\r" in value:
        return False
    return underscore(value) == value


def module_segments(module: str) -> list[str]:
    """Split a dotted module name into its segments."""
    return module.split(".")
