"""
First-use seeding of the local store.

The demo course makes the reader usable offline before any sync has run.
It is written with the same composite keys a sync would use, and carries no
version, so a later sync never replaces it unless the catalog versions it.
"""

from __future__ import annotations

import logging

from coursereader.domain.models import Chapter, Course, Subchapter
from coursereader.infrastructure.sqlite.store import CourseStore

logger = logging.getLogger(__name__)

DEMO_COURSE_ID = "nextjs-fundamentals"

_INTRODUCTION = """# Introduction to Next.js

Next.js is a React framework for building full-stack web applications. It provides:

- **Server-Side Rendering (SSR)** - Render pages on the server for better SEO and performance
- **Static Site Generation (SSG)** - Pre-render pages at build time
- **App Router** - Modern routing with React Server Components
- **API Routes** - Build your backend API alongside your frontend
"""

_GETTING_STARTED = """# Getting Started

To create a new Next.js application, run:

```bash
npx create-next-app@latest my-app
cd my-app
npm run dev
```
"""

_APP_ROUTER = """# The App Router

The App Router uses React Server Components by default and provides
routing, layouts and data fetching built on the file system.
"""

_PAGES = """# Creating Pages

Pages are created by adding files to the `app` directory:

- `app/page.tsx` -> `/`
- `app/about/page.tsx` -> `/about`
- `app/blog/[slug]/page.tsx` -> `/blog/:slug`
"""

_LAYOUTS = """# Layouts

Layouts are UI shared between multiple pages. They preserve state and
don't re-render on navigation.
"""


def demo_course() -> tuple[Course, list[Chapter], list[Subchapter]]:
    """Build the demo course records."""
    course = Course(
        id=DEMO_COURSE_ID,
        title="Next.js Fundamentals",
        description=(
            "Learn the basics of Next.js 14+, including App Router, "
            "Server Components, and more."
        ),
        tags=["nextjs", "react"],
        difficulty="beginner",
    )
    chapters = [
        Chapter(DEMO_COURSE_ID, "introduction", "Introduction", _INTRODUCTION, sort_order=1),
        Chapter(DEMO_COURSE_ID, "getting-started", "Getting Started", _GETTING_STARTED, sort_order=2),
        Chapter(DEMO_COURSE_ID, "app-router", "The App Router", _APP_ROUTER, sort_order=3),
    ]
    subchapters = [
        Subchapter(DEMO_COURSE_ID, "app-router", "pages", "Creating Pages", _PAGES, sort_order=1),
        Subchapter(DEMO_COURSE_ID, "app-router", "layouts", "Layouts", _LAYOUTS, sort_order=2),
    ]
    return course, chapters, subchapters


def populate_demo_course(store: CourseStore) -> bool:
    """
    Write the demo course unless a course with its id already exists.

    Returns:
        True if the course was written, False if it was already present
    """
    if store.get_course(DEMO_COURSE_ID) is not None:
        logger.info("Demo course '%s' already exists", DEMO_COURSE_ID)
        return False

    course, chapters, subchapters = demo_course()
    with store.transaction():
        store.upsert_course(course)
        for chapter in chapters:
            store.upsert_chapter(chapter)
        for subchapter in subchapters:
            store.upsert_subchapter(subchapter)

    logger.info("Seeded demo course '%s'", DEMO_COURSE_ID)
    return True
