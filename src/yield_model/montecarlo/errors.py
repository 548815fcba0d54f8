# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Error types raised by the yield forecaster."""


class InvalidParameterError(ValueError):
    """A scenario or configuration value is outside its valid range.

    Fatal to the forecast call; the caller must fix the input.
    """


class DataSourceDegraded(Exception):
    """A market data provider could not deliver data.

    Providers raise this; the forecaster recovers by falling back to
    synthetic market data and never lets it reach the caller.
    """
