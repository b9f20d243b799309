#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Command-line entry point: ``python -m textlight --image photo.png --filter total``."""
from __future__ import annotations

from .highlight.cli import main

if __name__ == "__main__":
    main()
