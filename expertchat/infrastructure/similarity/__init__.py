# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Semantic similarity lookup for topic expansion."""

from expertchat.infrastructure.similarity.client import SimilarityResolver, normalize_term

__all__ = ["SimilarityResolver", "normalize_term"]
