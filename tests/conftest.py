from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from adaptive_news.telemetry import metrics


@pytest.fixture(autouse=True)
def _reset_metrics() -> None:
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture()
def listing_html() -> str:
    stories = []
    for index, (slug, title) in enumerate(
        [
            ("council-vote", "City council approves riverside park plan"),
            ("school-budget", "School board debates next year's budget"),
            ("bridge-repairs", "Bridge repairs to close main street for weeks"),
        ],
        start=1,
    ):
        stories.append(
            f"""
            <div class="story" id="story-{index}">
              <h2><a href="/2024/03/0{index}/{slug}">{title}</a></h2>
              <time datetime="2024-03-0{index}">March {index}, 2024</time>
              <p>Reporters followed the story through a long evening of public comment and debate.</p>
            </div>
            """
        )
    return f"""
    <html>
      <head><title>Example Daily</title></head>
      <body>
        <div class="stories">{''.join(stories)}</div>
        <div class="footer">
          <a href="/about/">About us and our newsroom team</a>
          <span>Example Daily has covered the river valley for more than a century.</span>
        </div>
      </body>
    </html>
    """


@pytest.fixture()
def prose_html() -> str:
    paragraph = (
        "The city council voted on Monday to approve a long-debated plan that turns the old "
        "riverside warehouses into a public park with walking trails and a small boat launch."
    )
    body = "".join(f"<p>{paragraph} Paragraph {index} adds more detail for readers.</p>" for index in range(5))
    return f"""
    <html>
      <head><title>Riverside park plan wins council approval</title></head>
      <body>{body}</body>
    </html>
    """


@pytest.fixture()
def card_grid_html() -> str:
    cards = "".join(
        f"""
        <div class="card">
          <h2><a href="/2024/03/0{index}/story-{index}">Harbour story number {index} draws a crowd</a></h2>
          <time datetime="2024-03-0{index}">March {index}</time>
          <p>Residents lined the quay to watch the new ferry arrive.</p>
        </div>
        """
        for index in range(1, 6)
    )
    return f'<html><body><div class="grid">{cards}</div></body></html>'
