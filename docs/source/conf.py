"""Configuration file for the Sphinx documentation builder."""

# -- Project information

from tcpmodbus import __version__ as tcpmodbus_version

project = "tcpmodbus"
copyright = "2025, tcpmodbus contributors"  # noqa: A001
author = "tcpmodbus contributors"

release = tcpmodbus_version
version = tcpmodbus_version

# -- General configuration

extensions = [
    "sphinx.ext.doctest",
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx_rtd_theme",
    "sphinx.ext.intersphinx",
    "sphinx.ext.napoleon",
]

autoclass_content = "both"

intersphinx_mapping = {
    "python": ("https://docs.python.org/3/", None),
    "tenacity": ("https://tenacity.readthedocs.io/en/latest/", None),
}
intersphinx_disabled_domains = ["std"]

pygments_style = "sphinx"

# -- Options for HTML output

html_theme = "sphinx_rtd_theme"
