# installer/catalogs.py
"""
Static package catalogs for the AI Academy workstation.
"""

from typing import List, Optional

from installer.models import InstallItem, InstallOptions, ItemKind
from provisioner.config_models import AppSettings

HOMEBREW_TAPS: List[str] = [
    "homebrew/cask-versions",
    "mongodb/brew",
]

# Core development tools. "{python}" and "{node}" are filled from settings.
BREW_PACKAGES: List[str] = [
    # Version Control & Build Tools
    "git",
    "git-lfs",
    "cmake",
    "gcc",
    "openblas",
    "libomp",
    # Python & Environment Management
    "python@{python}",
    "pyenv",
    "pipenv",
    "poetry",
    # Data Processing
    "apache-spark",
    "postgresql@14",
    "redis",
    "sqlite",
    "mongodb-community",
    # Cloud & Container Tools
    "docker",
    "docker-compose",
    "kubectl",
    "awscli",
    "azure-cli",
    "google-cloud-sdk",
    # Utilities
    "wget",
    "curl",
    "jq",
    "htop",
    "tree",
    "tmux",
    "ffmpeg",
    "graphviz",
    "pandoc",
    # Node.js for Jupyter extensions
    "node@{node}",
    "yarn",
]

BREW_CASK_APPS: List[str] = [
    # IDEs & Editors
    "visual-studio-code",
    "pycharm-ce",
    "jupyter-notebook-viewer",
    "sublime-text",
    # Data Science Tools
    "tableau-public",
    "rstudio",
    "anaconda",
    # Containers & Virtualization
    "docker",
    "virtualbox",
    # Database Tools
    "dbeaver-community",
    "mongodb-compass",
    "postgres-unofficial",
    # API & Testing
    "postman",
    "insomnia",
    # Communication
    "slack",
    "zoom",
    "discord",
    # Browsers
    "google-chrome",
    "firefox",
    # Utilities
    "iterm2",
    "rectangle",
    "cyberduck",
    "github",
    "gitkraken",
    # Documentation
    "notion",
    "obsidian",
    "typora",
]

_NO_CACHE = InstallOptions(no_cache=True)

# (distribution name, import name or None when it matches, options)
PYTHON_AI_PACKAGES: List[tuple] = [
    # Core ML/DL Frameworks
    ("tensorflow", None, _NO_CACHE),
    ("tensorflow-metal", None, _NO_CACHE),
    ("torch", None, _NO_CACHE),
    ("torchvision", None, _NO_CACHE),
    ("torchaudio", None, _NO_CACHE),
    ("jax", None, _NO_CACHE),
    ("jaxlib", None, _NO_CACHE),
    # Core Data Science
    ("numpy", None, _NO_CACHE),
    ("pandas", None, _NO_CACHE),
    ("scipy", None, _NO_CACHE),
    ("scikit-learn", "sklearn", _NO_CACHE),
    ("statsmodels", None, _NO_CACHE),
    # Deep Learning Extensions
    ("transformers", None, _NO_CACHE),
    ("datasets", None, _NO_CACHE),
    ("tokenizers", None, _NO_CACHE),
    ("accelerate", None, _NO_CACHE),
    ("diffusers", None, _NO_CACHE),
    # Computer Vision
    ("opencv-python", "cv2", _NO_CACHE),
    ("pillow", "PIL", _NO_CACHE),
    ("scikit-image", "skimage", _NO_CACHE),
    ("albumentations", None, _NO_CACHE),
    # NLP
    ("nltk", None, _NO_CACHE),
    ("spacy", None, _NO_CACHE),
    ("gensim", None, _NO_CACHE),
    ("textblob", None, _NO_CACHE),
    ("langchain", None, _NO_CACHE),
    ("openai", None, _NO_CACHE),
    ("anthropic", None, _NO_CACHE),
    # Visualization
    ("matplotlib", None, _NO_CACHE),
    ("seaborn", None, _NO_CACHE),
    ("plotly", None, _NO_CACHE),
    ("bokeh", None, _NO_CACHE),
    ("altair", None, _NO_CACHE),
    ("yellowbrick", None, _NO_CACHE),
    # MLOps & Experiment Tracking
    ("mlflow", None, _NO_CACHE),
    ("wandb", None, _NO_CACHE),
    ("tensorboard", None, _NO_CACHE),
    ("optuna", None, _NO_CACHE),
    ("ray", None, _NO_CACHE),
    ("dvc", None, _NO_CACHE),
    # AutoML. auto-sklearn's pinned dependencies never resolve on current Pythons.
    ("auto-sklearn", "autosklearn", InstallOptions(no_deps=True)),
    ("h2o", None, _NO_CACHE),
    ("pycaret", None, _NO_CACHE),
    # Jupyter & Development
    ("jupyter", None, _NO_CACHE),
    ("jupyterlab", None, _NO_CACHE),
    ("notebook", None, _NO_CACHE),
    ("ipywidgets", None, _NO_CACHE),
    ("nbconvert", None, _NO_CACHE),
    ("black", None, _NO_CACHE),
    ("pylint", None, _NO_CACHE),
    ("pytest", None, _NO_CACHE),
    ("tqdm", None, _NO_CACHE),
    # Web Frameworks
    ("fastapi", None, _NO_CACHE),
    ("streamlit", None, _NO_CACHE),
    ("gradio", None, _NO_CACHE),
    ("flask", None, _NO_CACHE),
    ("django", None, _NO_CACHE),
    # Additional Tools
    ("gymnasium", None, _NO_CACHE),
    ("stable-baselines3", None, _NO_CACHE),
    ("xgboost", None, _NO_CACHE),
    ("lightgbm", None, _NO_CACHE),
    ("catboost", None, _NO_CACHE),
    ("prophet", None, _NO_CACHE),
    ("surprise", None, _NO_CACHE),
]

# Only installable on Apple Silicon.
ARM64_ONLY_PACKAGES = frozenset({"tensorflow-metal"})

JUPYTER_EXTRA_PACKAGES: List[str] = [
    "jupyter_contrib_nbextensions",
    "jupyterlab-git",
    "jupyterlab-lsp",
]

JUPYTER_NBEXTENSIONS: List[str] = [
    "code_prettify/code_prettify",
    "collapsible_headings/main",
    "execute_time/ExecuteTime",
]

VS_EXTENSIONS: List[str] = [
    "ms-python.python",
    "ms-python.vscode-pylance",
    "ms-python.debugpy",
    "ms-toolsai.jupyter",
    "ms-toolsai.jupyter-keymap",
    "ms-toolsai.jupyter-renderers",
    "ms-toolsai.vscode-jupyter-cell-tags",
    "GitHub.copilot",
    "GitHub.copilot-labs",
    "ms-azuretools.vscode-docker",
    "ms-vscode-remote.remote-containers",
    "mechatroner.rainbow-csv",
    "GrapeCity.gc-excelviewer",
    "RandomFractalsInc.vscode-data-preview",
    "hediet.vscode-drawio",
    "janisdd.vscode-edit-csv",
]


def command_packages(app_settings: AppSettings) -> List[InstallItem]:
    return [
        InstallItem(
            ItemKind.COMMAND_PACKAGE,
            name.format(
                python=app_settings.python_version, node=app_settings.node_version
            ),
        )
        for name in BREW_PACKAGES
    ]


def gui_applications() -> List[InstallItem]:
    return [InstallItem(ItemKind.GUI_APPLICATION, name) for name in BREW_CASK_APPS]


def language_packages(architecture: Optional[str] = None) -> List[InstallItem]:
    """Python packages for the academy virtualenv, filtered for `architecture`."""
    items = []
    for name, import_name, options in PYTHON_AI_PACKAGES:
        if name in ARM64_ONLY_PACKAGES and architecture != "arm64":
            continue
        items.append(
            InstallItem(
                ItemKind.LANGUAGE_PACKAGE, name, options=options, import_name=import_name
            )
        )
    return items


def jupyter_packages() -> List[InstallItem]:
    return [
        InstallItem(ItemKind.LANGUAGE_PACKAGE, name, options=_NO_CACHE)
        for name in JUPYTER_EXTRA_PACKAGES
    ]


def editor_extensions() -> List[InstallItem]:
    return [
        InstallItem(ItemKind.EDITOR_EXTENSION, name, options=InstallOptions(force=True))
        for name in VS_EXTENSIONS
    ]
