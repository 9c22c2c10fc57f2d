# !/usr/bin/env python3
# filename: ai-academy-provisioner/install.py
# -*- coding: utf-8 -*-
"""
Entry point for the AI Academy workstation provisioner.
"""

import sys

from provisioner.main_installer import main

if __name__ == "__main__":
    sys.exit(main())
