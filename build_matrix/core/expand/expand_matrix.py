from __future__ import annotations

import logging
from typing import Mapping, Sequence

from build_matrix.core.expand.limits import DEFAULT_LIMITS, ExpandLimits
from build_matrix.core.model import Axis


logger = logging.getLogger(__name__)


def count_permutations(matrix: Mapping[str, Sequence[str]]) -> int:
    """Return the full cartesian size of the matrix, ignoring the caps.

    An empty matrix, or any variable with no values, gives 0.
    """
    total = 0
    for i, values in enumerate(matrix.values()):
        total *= len(values)
        # the accumulator starts at 0, so seed it from the first variable
        if i == 0 and total == 0:
            total = len(values)
    return total


def expand_matrix(
    matrix: Mapping[str, Sequence[str]],
    *,
    limits: ExpandLimits = DEFAULT_LIMITS,
) -> list[Axis]:
    """Calculate the axes (permutations) of a build matrix.

    Permutation index p is read as a mixed-radix number whose digits are the
    value indexes of each variable, first variable most significant. The last
    variable therefore cycles fastest.

    Truncation is silent:
      - once more than limits.limit_tags variables are assigned, the rest of
        the variables are left out of the axis;
      - once more than limits.limit_axis axes are emitted, enumeration stops.

    The matrix is not modified and no duplicate axes are removed.
    """

    # Snapshot the variable order once; index arithmetic depends on it.
    tags = list(matrix.keys())
    total = count_permutations(matrix)

    axis_list: list[Axis] = []
    for p in range(total):
        axis = Axis()
        decr = total
        for assigned, tag in enumerate(tags, start=1):
            elems = matrix[tag]
            decr //= len(elems)
            axis[tag] = elems[(p // decr) % len(elems)]

            if assigned > limits.limit_tags:
                if assigned < len(tags):
                    logger.debug(
                        "axis %d truncated to %d of %d variables", p, assigned, len(tags)
                    )
                break

        axis_list.append(axis)

        if len(axis_list) > limits.limit_axis:
            if len(axis_list) < total:
                logger.debug(
                    "matrix truncated to %d of %d permutations", len(axis_list), total
                )
            break

    return axis_list
