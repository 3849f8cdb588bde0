from core.rule_engine import evaluate
from core.signal_extractor import classify_href, extract

URL = "https://example.com/page"


def test_missing_title_is_absent_not_placeholder():
    signals = extract("<html><body><p>No head here</p></body></html>", URL)
    assert signals.title is None
    assert signals.description is None
    assert signals.keywords == []


def test_empty_title_is_absent_but_blank_title_is_kept():
    assert extract("<title></title>", URL).title is None
    assert extract("<title>   </title>", URL).title == "   "

    titles = [s.title for s in evaluate(extract("<title>   </title>", URL))]
    assert "タイトルが短すぎます" in titles
    assert "タイトルタグが見つかりません" not in titles


def test_empty_markup_never_raises():
    signals = extract("", URL)
    assert signals.url == URL
    assert signals.domain == "example.com"
    assert signals.content.word_count == 0
    assert signals.images.total == 0
    assert signals.images.alt_optimization_rate == 0
    assert signals.links.total == 0


def test_first_title_and_meta_win_regardless_of_quotes_and_case():
    html = """
    <html><head>
      <title>  First Title  </title>
      <title>Second Title</title>
      <META NAME='Description' CONTENT='Single quoted description'>
      <meta name="description" content="ignored second description">
      <meta content="seo, python , , fastapi" name="keywords">
    </head></html>
    """
    signals = extract(html, URL)
    assert signals.title == "First Title"
    assert signals.description == "Single quoted description"
    assert signals.keywords == ["seo", "python", "fastapi"]


def test_headings_collected_in_order_with_inner_tags_stripped():
    html = """
    <h1>Main <span>Topic</span></h1>
    <h2>Alpha</h2><h3>Alpha detail</h3><h2>Beta</h2>
    """
    signals = extract(html, URL)
    assert signals.headings.h1 == ["Main Topic"]
    assert signals.headings.h2 == ["Alpha", "Beta"]
    assert signals.headings.h3 == ["Alpha detail"]


def test_image_alt_counts_and_rate():
    html = """
    <img src="a.png">
    <img src="b.png" alt="">
    <img src="c.png" alt="Chart of results">
    <img src="d.png" alt='Logo' />
    """
    signals = extract(html, URL)
    assert signals.images.total == 4
    assert signals.images.without_alt == 2
    assert signals.images.alt_optimization_rate == 50


def test_alt_rate_rounds_half_up():
    html = '<img src="a.png"><img src="b.png" alt="b"><img src="c.png" alt="c">'
    signals = extract(html, URL)
    # 2/3 -> 66.67 -> 67
    assert signals.images.alt_optimization_rate == 67


def test_without_alt_never_exceeds_total():
    for html in ["", "<img>", "<img alt=''><img alt='x'>", "<p>text</p>"]:
        images = extract(html, URL).images
        assert 0 <= images.without_alt <= images.total


def test_link_classification():
    html = """
    <a href="/about">About</a>
    <a href="https://example.com/contact">Contact</a>
    <a href="https://other.com/x">Other</a>
    <a href="mailto:a@b.com">Mail</a>
    <a href="#top">Top</a>
    <a>No href</a>
    <a href="">Empty</a>
    """
    links = extract(html, "https://example.com").links
    assert links.internal == 2
    assert links.external == 1
    assert links.total == 5
    assert links.total >= links.internal + links.external


def test_classify_href_internal_checked_first():
    assert classify_href("/about", "example.com") == "internal"
    assert classify_href("https://other.com/x", "example.com") == "external"
    assert classify_href("mailto:a@b.com", "example.com") is None
    # contains the domain and starts with http: internal wins
    assert classify_href("https://cdn.example.com/app.js", "example.com") == "internal"


def test_word_count_strips_every_tag_including_script_bodies():
    html = "<title>Hello world</title>\n<p>one two three</p>\n<script>var a = 1;</script>"
    signals = extract(html, URL)
    # 2 (title) + 3 (paragraph) + 4 (script body)
    assert signals.content.word_count == 9


def test_content_flags_are_substring_checks():
    html = """
    <meta property="og:title" content="x">
    <meta name="twitter:card" content="summary">
    <script type="application/ld+json">{"@type": "Article"}</script>
    """
    content = extract(html, URL).content
    assert content.has_open_graph
    assert content.has_twitter_card
    assert content.has_structured_data

    bare = extract("<p>plain</p>", URL).content
    assert not bare.has_open_graph
    assert not bare.has_twitter_card
    assert not bare.has_structured_data


def test_resource_counts():
    scripts = "".join(f'<script src="/s{i}.js"></script>' for i in range(11))
    styles = "".join(f'<link rel="stylesheet" href="/c{i}.css">' for i in range(6))
    html = scripts + "<script>inline()</script>" + styles + '<link rel="preload" href="/f.woff2">'
    resources = extract(html, URL).resources
    assert resources.scripts == 11
    assert resources.stylesheets == 6


def test_wire_names_are_camel_case():
    data = extract("<img src='a.png'>", URL).model_dump(by_alias=True)
    assert data["images"]["withoutAlt"] == 1
    assert "altOptimizationRate" in data["images"]
    assert "wordCount" in data["content"]
    assert "hasStructuredData" in data["content"]
    assert "analyzedAt" in data
