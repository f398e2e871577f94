# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""BrewFinder: brewery discovery behind a simple login."""

__version__ = "1.0.0"
