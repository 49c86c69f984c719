from __future__ import annotations

# variable name -> candidate values, in declaration order
Matrix = dict[str, list[str]]


class Axis(dict[str, str]):
    """One resolved combination of the build matrix: one value per variable.

    Keys keep the order they were assigned in, so the string form is stable.
    """

    def env(self) -> dict[str, str]:
        return dict(self)

    def to_env(self) -> str:
        return ",".join(f"{k}={v}" for k, v in self.items())

    def __str__(self) -> str:
        return self.to_env()
