# SPDX-FileCopyrightText: 2025-present DouglasMacKrell <d.mackrell@gmail.com>
#
# SPDX-License-Identifier: MIT

"""libraryview - client-side data layer for a personal media library."""

from libraryview.__about__ import __version__

__all__ = ["__version__"]
