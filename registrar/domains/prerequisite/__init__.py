# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prerequisite graph domain."""

from registrar.domains.prerequisite.service import (
    DuplicatePrerequisiteError,
    PrerequisiteCycleError,
    PrerequisiteGraph,
    PrerequisiteNotFoundError,
    SelfPrerequisiteError,
)

__all__ = [
    "DuplicatePrerequisiteError",
    "PrerequisiteCycleError",
    "PrerequisiteGraph",
    "PrerequisiteNotFoundError",
    "SelfPrerequisiteError",
]
