# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Exceptions raised by the Box Pusher core."""


class InvalidGridError(ValueError):
    """The cells given to a grid break one of its invariants."""


class TooManyOrNoPlayersError(InvalidGridError):
    """The grid does not hold exactly one player cell."""


class BoxTargetMismatchError(InvalidGridError):
    """Box count differs from target count, or both are zero."""


class CodecError(ValueError):
    """A level document could not be read or written."""


class MalformedAttributeError(CodecError):
    """A required attribute or element is missing or unparsable."""


class DimensionMismatchError(CodecError):
    """Declared width/height disagree with the rows in the document."""


class LevelIdNotFoundError(CodecError):
    """A level collection has no level with the requested id."""


class StoreError(RuntimeError):
    """Progress or leaderboard storage failed for a reason other than absence."""


class LevelNotFoundError(LookupError):
    """No level with the given name or difficulty is available."""


class InvalidLevelNameError(ValueError):
    """A level name cannot be used as a file name."""
