# -*- coding: utf-8 -*-
"""Diet domain (per-day meal log, totals and the HTTP surface)."""
