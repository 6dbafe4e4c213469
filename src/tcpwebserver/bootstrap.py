"""
=============================================================================
WEB ROOT BOOTSTRAP
=============================================================================

First run convenience: if the web root does not exist yet, create it and
drop in a tiny sample site so `python -m tcpwebserver` shows something in
the browser straight away.

    webroot/
    ├── index.html    links about.html, styles.css, script.js
    ├── about.html
    ├── styles.css
    └── script.js

An existing directory is never touched, even when it is empty or lacks an
index.html. Only a missing directory triggers the sample content.

=============================================================================
"""

import logging
from pathlib import Path


logger = logging.getLogger(__name__)


INDEX_HTML = """<html>
  <head>
    <title>My Web Server</title>
    <link rel="stylesheet" type="text/css" href="styles.css">
  </head>
  <body>
    <h1>Welcome to My TCP Web Server!</h1>
    <p>This is a simple web server built with Python and TCP sockets.</p>
    <a href="about.html">About Page</a>
    <script src="script.js"></script>
  </body>
</html>
"""

ABOUT_HTML = """<html>
  <head>
    <title>About - My Web Server</title>
    <link rel="stylesheet" type="text/css" href="styles.css">
  </head>
  <body>
    <h1>About This Server</h1>
    <p>This is a TCP socket-based web server written in Python.</p>
    <a href="index.html">Back to Home</a>
  </body>
</html>
"""

STYLES_CSS = """body {
    font-family: Arial, sans-serif;
    margin: 40px;
    background-color: #f5f5f5;
}

h1 {
    color: #333;
    border-bottom: 2px solid #007acc;
    padding-bottom: 10px;
}

p {
    line-height: 1.6;
    color: #666;
}

a {
    color: #007acc;
    text-decoration: none;
}

a:hover {
    text-decoration: underline;
}
"""

SCRIPT_JS = """console.log('Web server is running!');

document.addEventListener('DOMContentLoaded', function() {
    console.log('Page loaded successfully');

    const heading = document.querySelector('h1');
    if (heading) {
        heading.addEventListener('click', function() {
            alert('Hello from the TCP Web Server!');
        });
    }
});
"""

SAMPLE_FILES = {
    "index.html": INDEX_HTML,
    "about.html": ABOUT_HTML,
    "styles.css": STYLES_CSS,
    "script.js": SCRIPT_JS,
}


def ensure_webroot(root_dir: str | Path) -> Path:
    """
    Make sure the web root exists, creating a sample site if it does not.

    Args:
        root_dir: Web root directory.

    Returns:
        The root as an absolute path.

    Raises:
        ValueError: If root_dir exists but is not a directory.
        OSError: If the directory or a sample file cannot be written.
    """
    root = Path(root_dir).resolve()

    if root.is_dir():
        return root
    if root.exists():
        raise ValueError(f"Web root is not a directory: {root}")

    root.mkdir(parents=True)
    for name, content in SAMPLE_FILES.items():
        # newline="\n": identical bytes on every platform
        with open(root / name, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)

    logger.info(f"Created web root with sample files: {root}")
    return root
