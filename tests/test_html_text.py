"""Tests for marker-based documentation page extraction."""

from mcp_servers.terraform_docs.html_text import extract_example_blocks, extract_main_text, strip_tags

PAGE = """
<html>
<head><style>.x { color: red; }</style><script>var a = "<div>";</script></head>
<body>
  <nav>Providers | Modules</nav>
  <div id="main-content" class="docs">
    <h1>aws_instance</h1>
    <p>Provides an EC2 instance &amp; related settings.</p>
    <div class="note"><p>Nested note.</p></div>
    <div class="highlight"><pre><code>resource "aws_instance" "web" {
  ami = "ami-123"
}</code></pre></div>
  </div>
  <footer>Copyright</footer>
</body>
</html>
"""


def test_strip_tags_drops_scripts_and_unescapes():
    assert strip_tags("<p>a &lt;b&gt;</p>\n\n<script>x()</script>  c") == "a <b> c"


def test_main_text_is_limited_to_the_content_container():
    text = extract_main_text(PAGE)
    assert text.startswith("aws_instance Provides an EC2 instance & related settings.")
    assert "Nested note." in text
    assert "Providers" not in text
    assert "Copyright" not in text


def test_page_without_markers_has_no_main_text():
    assert extract_main_text("<html><body><p>plain</p></body></html>") == ""
    assert extract_main_text("") == ""


def test_main_and_article_tags_are_recognised():
    assert extract_main_text("<body><main><p>Body text</p></main><p>after</p></body>") == "Body text"
    assert extract_main_text("<article class='doc'>Doc</article>") == "Doc"


def test_example_blocks_in_page_order():
    page = (
        PAGE
        + '<pre>second block</pre>'
        + '<div class="highlight"><pre><code>resource "aws_instance" "web" {\n  ami = "ami-123"\n}</code></pre></div>'
    )
    blocks = extract_example_blocks(page)
    assert blocks == [
        'resource "aws_instance" "web" {\n  ami = "ami-123"\n}',
        "second block",
    ]


def test_highlight_word_in_prose_is_ignored():
    page = "<p>We highlight this.</p><code>data &quot;x&quot; &quot;y&quot; {}</code>"
    assert extract_example_blocks(page) == ['data "x" "y" {}']


def test_no_example_markers():
    assert extract_example_blocks("<p>nothing here</p>") == []
