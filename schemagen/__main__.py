"""Entry point: python -m schemagen gen.schema Blog.Post blog_posts title:string"""

from __future__ import annotations

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
