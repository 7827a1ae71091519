"""Sphinx configuration for the xmlcsv API documentation."""

import os
import sys

sys.path.insert(0, os.path.abspath('../../src/'))

project = 'xmlcsv'
copyright = '2025, takotime808'
author = 'takotime808'
master_doc = 'index'

extensions = [
    "sphinx.ext.napoleon",
    "sphinx.ext.doctest",
    "autoapi.extension",
    "myst_parser",
    "sphinx_copybutton",
]

# API pages for the library and the CLI package
autoapi_type = "python"
autoapi_dirs = ["../../src/xmlcsv/", "../../src/cli_xmlcsv/"]
autoapi_options = ["members", "show-module-summary"]

# extractor docstrings mix NumPy and Google sections
napoleon_numpy_docstring = True
napoleon_google_docstring = True

exclude_patterns = ["build", "_build"]

html_theme = "furo"
html_show_sphinx = False
