# Sphinx configuration for the workflow engine API docs

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / 'src'))

from workflow_engine import __version__  # noqa: E402

project = 'Configurable Workflow Engine'
author = 'Workflow Engine contributors'
copyright = f'2025, {author}'
version = release = __version__

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx_autodoc_typehints',
]

exclude_patterns = ['_build']

html_theme = 'alabaster'
html_title = f'{project} {release}'

# Pydantic generates __init__ from fields, so document the fields instead.
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'undoc-members': True,
    'show-inheritance': True,
    'exclude-members': 'model_config,model_fields,model_computed_fields',
}
autodoc_typehints = 'description'
autodoc_class_signature = 'separated'

typehints_fully_qualified = False
always_document_param_types = False

napoleon_google_docstring = True
napoleon_numpy_docstring = False

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'pydantic': ('https://docs.pydantic.dev/latest', None),
}
