"""DemoSite — small target web server for PathScanner testing.

Serves a robots.txt with a disallowed area and a Sitemap line, a sitemap
index pointing at one urlset, and linked pages whose forms trip each of the
scanner's form indicators.
"""

from flask import Flask, Response, render_template_string

app = Flask(__name__)


# ── Shared HTML layout ──────────────────────────────────────────

_LAYOUT = """<!DOCTYPE html>
<html><head><title>DemoSite — {{ title }}</title></head>
<body>
<p><a href="/">Home</a></p>
<h2>{{ title }}</h2>
{{ content|safe }}
</body></html>
"""


def page(title, content):
    return render_template_string(_LAYOUT, title=title, content=content)


# ══════════════════════════════════════════════════════════════════
#  Well-known files
# ══════════════════════════════════════════════════════════════════

ROBOTS_TXT = """# DemoSite robots policy
User-agent: *
Disallow: /private/
Allow: /private/help
Crawl-delay: 0.01

Sitemap: http://demo.local/sitemap_index.xml
"""

SITEMAP_INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>http://demo.local/sitemap-pages.xml</loc></sitemap>
</sitemapindex>
"""

SITEMAP_PAGES = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>http://demo.local/about</loc></url>
  <url><loc>http://demo.local/private/reports</loc></url>
  <url><loc>/relative-is-dropped</loc></url>
</urlset>
"""


@app.route("/robots.txt")
def robots():
    return Response(ROBOTS_TXT, mimetype="text/plain")


@app.route("/sitemap_index.xml")
def sitemap_index():
    return Response(SITEMAP_INDEX, mimetype="application/xml")


@app.route("/sitemap-pages.xml")
def sitemap_pages():
    return Response(SITEMAP_PAGES, mimetype="application/xml")


# ══════════════════════════════════════════════════════════════════
#  Pages
# ══════════════════════════════════════════════════════════════════

@app.route("/")
def home():
    return page("Home", """
    <ul>
        <li><a href="/login">Login</a></li>
        <li><a href="/search">Search</a></li>
        <li><a href="/about#team">About</a></li>
        <li><a href="/private/admin">Admin</a></li>
        <li><a href="https://elsewhere.example/">External</a></li>
        <li><a href="mailto:root@demo.local">Mail</a></li>
    </ul>
    """)


@app.route("/about")
def about():
    return page("About", """
    <p>Nothing to submit here.</p>
    <a href="/profile?tab=settings&amp;id=7">Profile</a>
    """)


@app.route("/login")
def login():
    # POST without a CSRF token, password open to autocomplete
    return page("Login", """
    <form action="/session" method="post">
        <input type="text" name="username" required>
        <input type="password" name="password" required>
        <button type="submit">Sign in</button>
    </form>
    """)


@app.route("/search")
def search():
    # Protected POST next to an innocuous GET search
    return page("Search", """
    <form action="/search" method="get">
        <input type="search" name="q">
    </form>
    <form action="/feedback" method="post">
        <input type="hidden" name="csrf_token" value="8f14e45fceea167a">
        <textarea name="message"></textarea>
    </form>
    """)


@app.route("/profile")
def profile():
    # Sequential user id exposed in a hidden field
    return page("Profile", """
    <form action="http://demo.local/profile/update" method="post">
        <input type="hidden" name="csrf_token" value="c9f0f895fb98ab91">
        <input type="hidden" name="user_id" value="1042">
        <input type="email" name="email">
    </form>
    """)


@app.route("/private/<path:rest>")
def private(rest):
    return page("Private", "<p>Staff only.</p>")


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=True)
