from pathlib import Path

from bs4 import BeautifulSoup

from page_snapshot.bundle import (
    build_readme,
    format_css,
    format_html,
    strip_unwanted_elements,
    write_bundle,
)
from page_snapshot.config import TRACKING_SCRIPT_PATTERNS
from page_snapshot.document import parse_document
from page_snapshot.models import CloneJob

HTML = """<html><head>
<meta http-equiv="refresh" content="0; url=https://example.com/elsewhere">
<meta name="robots" content="noindex">
<meta name="description" content="kept">
<script src="https://www.google-analytics.com/analytics.js"></script>
<script src="https://www.googletagmanager.com/gtag/js?id=G-1"></script>
</head><body>
<script src="https://connect.facebook.net/en_US/sdk.js"></script>
<script src="app.js"></script>
<noscript><img src="https://example.com/pixel.gif"></noscript>
<p>Hello &amp; welcome</p>
</body></html>"""


def test_strip_unwanted_elements_removes_trackers_and_offline_hazards():
    soup = parse_document(HTML)

    removed = strip_unwanted_elements(soup, TRACKING_SCRIPT_PATTERNS)

    assert removed == 6
    assert [s["src"] for s in soup.find_all("script")] == ["app.js"]
    assert soup.find("noscript") is None
    assert [m["name"] for m in soup.find_all("meta")] == ["description"]


def test_format_html_indents_and_keeps_entities_escaped():
    soup = parse_document("<html><body><div><p>a &lt; b</p></div></body></html>")

    formatted = format_html(soup, indent=2)

    assert "\n  <body>\n" in formatted
    assert "a &lt; b" in formatted
    assert BeautifulSoup(formatted, "html.parser").p.get_text(strip=True) == "a < b"


def test_format_css_pretty_prints_and_keeps_urls():
    formatted = format_css("a{color:red;background:url(bg.jpg)}", indent=2)

    assert "a {" in formatted
    assert "\n  color: red" in formatted
    assert "url(bg.jpg)" in formatted


def test_format_css_returns_blank_input_unchanged():
    assert format_css("\n") == "\n"


def test_readme_lists_source_hostname_and_files():
    job = CloneJob(source_url="https://www.example.com/landing", destination=Path("out"))

    readme = build_readme(job, ["index.html", "styles.css", "a.png"])

    assert readme.startswith("# Cloned Website: www.example.com\n")
    assert "https://www.example.com/landing" in readme
    assert "- `a.png`" in readme
    assert "Interactive features may not work" in readme


def test_write_bundle_persists_html_css_and_readme(tmp_path, config):
    job = CloneJob(source_url="https://example.com/", destination=tmp_path / "cloned-example-com")
    job.destination.mkdir()
    (job.destination / "a.png").write_bytes(b"a")
    soup = parse_document('<html><head></head><body><img src="a.png"></body></html>')

    files = write_bundle(job, soup, "body{margin:0}\n", ["a.png"], config)

    assert files == ["index.html", "styles.css", "a.png", "README.md"]
    assert 'src="a.png"' in (job.destination / "index.html").read_text(encoding="utf-8")
    assert "margin: 0" in (job.destination / "styles.css").read_text(encoding="utf-8")
    assert "- `a.png`" in (job.destination / "README.md").read_text(encoding="utf-8")


def squash(text):
    return " ".join(text.split())


def test_format_css_keeps_modern_selectors_and_at_rules():
    css = (
        "@supports (backdrop-filter: blur(4px)){.nav.is-open > a:hover{color:red}}\n"
        "@container card (min-width: 400px){.c{display:grid}}\n"
        ".a:is(.b,.c){color:red}\n"
        ".f:has(> img){color:green}\n"
        ".card{color:red; &:hover{color:blue}}\n"
    )

    formatted = squash(format_css(css, indent=2))

    assert "@supports (backdrop-filter: blur(4px))" in formatted
    assert ".nav.is-open > a:hover" in formatted
    assert "@container card" in formatted
    assert ".c {" in formatted
    assert ".a:is(.b," in formatted
    assert ".f:has(" in formatted
    assert "&:hover" in formatted
    assert "color: blue" in formatted
    assert "color: green" in formatted


def test_format_html_wraps_long_text_runs():
    words = " ".join(f"word{n}" for n in range(60))
    soup = parse_document(f"<html><body><p>{words}</p><pre>{words}</pre></body></html>")

    formatted = format_html(soup, indent=2, wrap_line_length=80)

    paragraph_lines = [line for line in formatted.splitlines() if "word" in line]
    assert len(paragraph_lines) > 2
    reparsed = BeautifulSoup(formatted, "html.parser")
    assert squash(reparsed.p.get_text()) == words
    assert reparsed.pre.get_text().strip() == words
    wrapped = [line for line in paragraph_lines if words not in line]
    assert all(len(line.strip()) <= 80 for line in wrapped)


def test_wrapping_preserves_non_breaking_spaces():
    text = "\xa0".join(["nbsp"] * 40)
    soup = parse_document(f"<p>{text}</p>")

    format_html(soup, wrap_line_length=20)

    assert soup.p.get_text() == text
