# -*- coding: utf-8 -*-
"""SeeFood — meal photo nutrition estimation and food diary backend."""

__version__ = "0.1.0"
