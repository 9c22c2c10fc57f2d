# configure/templates.py
# -*- coding: utf-8 -*-
"""
Text templates for generated workspace, shell and Jupyter files.

render(template_id, variables) is the only entry point. Text templates use
str.format placeholders; the welcome notebook is assembled as a dict and
serialised to JSON so its code cells can contain braces freely.
"""

import json
from typing import Any, Callable, Dict, Mapping

from provisioner import config as static_config
from provisioner.config_models import AppSettings

ACTIVATE_SCRIPT_TEMPLATE: str = """\
#!/bin/bash
source {venv_dir}/bin/activate
export PYTHONPATH="{academy_dir}:$PYTHONPATH"
echo "{academy_name} environment activated!"
echo "Python: $(which python)"
echo "Python version: $(python --version)"
echo "Run 'jupyter lab' to start Jupyter Lab"
"""

SHELL_ALIASES_TEMPLATE: str = """\
# {academy_name} aliases
alias academy='cd {academy_dir} && source {activate_script}'
alias jl='jupyter lab'
alias jn='jupyter notebook'
alias activate='source {activate_script}'
alias bootcamp='cd {academy_dir}'
"""

PYTHONPATH_TEMPLATE: str = 'export PYTHONPATH="$PYTHONPATH:{academy_dir}/scripts"\n'

BREW_SHELLENV_TEMPLATE: str = 'eval "$({brew_prefix}/bin/brew shellenv)"\n'

JUPYTER_CONFIG_TEMPLATE: str = """\
c = get_config()
c.NotebookApp.browser = 'open'
c.NotebookApp.open_browser = True
c.NotebookApp.notebook_dir = '{academy_dir}/notebooks'
"""

DESKTOP_LAUNCHER_TEMPLATE: str = """\
#!/bin/bash
source {activate_script}
cd {academy_dir}
jupyter lab
"""

README_TEMPLATE: str = """\
# {academy_name}

Welcome to your AI/ML learning environment!

## Quick Start

1. **Activate the environment:**
   ```bash
   source {activate_script}
   ```

2. **Start Jupyter Lab:**
   ```bash
   jupyter lab
   ```

3. **Open the welcome notebook:**
   Navigate to `notebooks/00-welcome.ipynb`

## Directory Structure

- **notebooks/** - Jupyter notebooks for lessons
- **datasets/** - Sample datasets
- **projects/** - Your projects
- **models/** - Saved models
- **scripts/** - Python scripts
- **docs/** - Documentation

## Installed Tools

### Development
- Python {python_version}
- Git & Git LFS
- Docker & Docker Compose
- Node.js {node_version}

### IDEs
- Visual Studio Code
- PyCharm Community Edition
- Sublime Text
- Jupyter Lab & Notebook

### AI/ML Libraries
- TensorFlow & PyTorch
- Scikit-learn
- Transformers (Hugging Face)
- OpenCV
- NLTK & spaCy

### Data Tools
- PostgreSQL
- MongoDB
- Redis
- Apache Spark

### Cloud Tools
- AWS CLI
- Azure CLI
- Google Cloud SDK

## Support

If you encounter issues, check the logs at:
{log_dir}/

Happy Learning! 🚀
"""

_LIBRARY_CHECK_SOURCE = [
    "# Test all major libraries\n",
    "import importlib\n",
    "\n",
    "libraries = {\n",
    "    'numpy': 'NumPy',\n",
    "    'pandas': 'Pandas',\n",
    "    'matplotlib': 'Matplotlib',\n",
    "    'sklearn': 'Scikit-learn',\n",
    "    'tensorflow': 'TensorFlow',\n",
    "    'torch': 'PyTorch',\n",
    "    'transformers': 'Transformers',\n",
    "    'cv2': 'OpenCV',\n",
    "    'nltk': 'NLTK',\n",
    "    'spacy': 'spaCy',\n",
    "    'jupyter': 'Jupyter'\n",
    "}\n",
    "\n",
    'print("Checking installed libraries:\\n")\n',
    "for module, name in libraries.items():\n",
    "    try:\n",
    "        lib = importlib.import_module(module)\n",
    "        version = getattr(lib, '__version__', 'installed')\n",
    '        print(f"✅ {name:15} {version}")\n',
    "    except ImportError:\n",
    '        print(f"❌ {name:15} not installed")',
]

_SINE_WAVE_SOURCE = [
    "# Test visualization\n",
    "import matplotlib.pyplot as plt\n",
    "import numpy as np\n",
    "\n",
    "x = np.linspace(0, 2*np.pi, 100)\n",
    "y = np.sin(x)\n",
    "\n",
    "plt.figure(figsize=(10, 4))\n",
    "plt.plot(x, y)\n",
    "plt.title('Environment Test: Sine Wave')\n",
    "plt.xlabel('x')\n",
    "plt.ylabel('sin(x)')\n",
    "plt.grid(True)\n",
    "plt.show()\n",
    "\n",
    'print("\\n✅ If you see a sine wave above, your environment is ready!")',
]


def _code_cell(source):
    return {
        "cell_type": "code",
        "execution_count": None,
        "metadata": {},
        "outputs": [],
        "source": source,
    }


def _welcome_notebook(variables: Mapping[str, Any]) -> str:
    notebook = {
        "cells": [
            {
                "cell_type": "markdown",
                "metadata": {},
                "source": [
                    f"# Welcome to {variables['academy_name']}!\n",
                    "\n",
                    "This notebook will help you verify your environment is set up correctly.",
                ],
            },
            _code_cell(
                [
                    "# Check Python version\n",
                    "import sys\n",
                    'print(f"Python version: {sys.version}")\n',
                    'print(f"Executable: {sys.executable}")',
                ]
            ),
            _code_cell(list(_LIBRARY_CHECK_SOURCE)),
            _code_cell(list(_SINE_WAVE_SOURCE)),
        ],
        "metadata": {
            "kernelspec": {
                "display_name": variables["kernel_display_name"],
                "language": "python",
                "name": variables["kernel_name"],
            },
            "language_info": {
                "name": "python",
                "version": variables["python_version"],
            },
        },
        "nbformat": 4,
        "nbformat_minor": 4,
    }
    return json.dumps(notebook, indent=1, ensure_ascii=False) + "\n"


def _from_text(template: str) -> Callable[[Mapping[str, Any]], str]:
    return lambda variables: template.format(**variables)


TEMPLATES: Dict[str, Callable[[Mapping[str, Any]], str]] = {
    "activate_script": _from_text(ACTIVATE_SCRIPT_TEMPLATE),
    "shell_aliases": _from_text(SHELL_ALIASES_TEMPLATE),
    "pythonpath_export": _from_text(PYTHONPATH_TEMPLATE),
    "brew_shellenv": _from_text(BREW_SHELLENV_TEMPLATE),
    "jupyter_config": _from_text(JUPYTER_CONFIG_TEMPLATE),
    "desktop_launcher": _from_text(DESKTOP_LAUNCHER_TEMPLATE),
    "readme": _from_text(README_TEMPLATE),
    "welcome_notebook": _welcome_notebook,
}


def academy_variables(app_settings: AppSettings) -> Dict[str, Any]:
    """Placeholder values shared by every academy template."""
    paths = app_settings.paths
    return {
        "academy_name": app_settings.academy_name,
        "python_version": app_settings.python_version,
        "node_version": app_settings.node_version,
        "academy_dir": paths.academy_dir,
        "venv_dir": paths.venv_dir,
        "activate_script": paths.activate_script,
        "log_dir": paths.log_dir,
        "kernel_name": static_config.KERNEL_NAME,
        "kernel_display_name": static_config.KERNEL_DISPLAY_NAME,
    }


def render(template_id: str, variables: Mapping[str, Any]) -> str:
    """
    Render a named template.

    Raises:
        KeyError: Unknown template id, or a placeholder missing from `variables`.
    """
    try:
        renderer = TEMPLATES[template_id]
    except KeyError:
        raise KeyError(f"Unknown template: {template_id}")
    return renderer(variables)
