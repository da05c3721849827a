"""Extrusion profiles and their preset catalog.

A profile bundles the per-conversion extrusion settings with the ranges that
make sense for a given kind of print. The geometry core never range-checks
settings itself; callers use :meth:`Profile.check` to warn about values
outside a profile's recommended ranges.
"""

from pydantic import BaseModel


class ProfileSettings(BaseModel):
    """Per-conversion extrusion settings.

    Attributes:
        thickness: Extrusion height of the outline body
        base_thickness: Height of the base slab (0 disables the slab)
        offset: Outline offset; positive expands, negative contracts
        simplify_tolerance: Path simplification tolerance (0 disables)
        remove_islands_threshold: Area below which closed paths are removed (0 disables)
        bevel: Size of the chamfer on the top edges of the body (0 disables)
    """

    thickness: float = 3.0
    base_thickness: float = 0.0
    offset: float = 0.0
    simplify_tolerance: float = 0.0
    remove_islands_threshold: float = 0.0
    bevel: float = 0.0


class ProfileConstraints(BaseModel):
    """Recommended (min, max) ranges for a profile's settings."""

    thickness_range: tuple[float, float]
    base_thickness_range: tuple[float, float]
    offset_range: tuple[float, float]
    simplify_tolerance_range: tuple[float, float]
    bevel_range: tuple[float, float]


class Profile(BaseModel):
    """A named preset with defaults and recommended ranges."""

    id: str
    name: str
    description: str
    defaults: ProfileSettings
    constraints: ProfileConstraints

    def check(self, settings: ProfileSettings) -> list[str]:
        """List settings that fall outside this profile's ranges.

        Args:
            settings: Settings to check

        Returns:
            Human-readable messages, empty when everything is in range
        """
        checks = [
            ("thickness", settings.thickness, self.constraints.thickness_range),
            ("base_thickness", settings.base_thickness, self.constraints.base_thickness_range),
            ("offset", settings.offset, self.constraints.offset_range),
            (
                "simplify_tolerance",
                settings.simplify_tolerance,
                self.constraints.simplify_tolerance_range,
            ),
            ("bevel", settings.bevel, self.constraints.bevel_range),
        ]
        messages: list[str] = []
        for name, value, (low, high) in checks:
            if not low <= value <= high:
                messages.append(
                    f"{name}={value:g} is outside the {self.name} range [{low:g}, {high:g}]"
                )
        return messages


PROFILES: list[Profile] = [
    Profile(
        id="logo-sign",
        name="Logo / Sign",
        description="Thick base with raised lettering or design. Good for wall-mounted signs.",
        defaults=ProfileSettings(
            thickness=3.0,
            base_thickness=2.0,
            offset=0.0,
            simplify_tolerance=0.1,
            remove_islands_threshold=0.6,
            bevel=0.0,
        ),
        constraints=ProfileConstraints(
            thickness_range=(1.0, 10.0),
            base_thickness_range=(0.5, 5.0),
            offset_range=(-2.0, 2.0),
            simplify_tolerance_range=(0.01, 1.0),
            bevel_range=(0.0, 2.0),
        ),
    ),
    Profile(
        id="cookie-cutter",
        name="Cookie Cutter",
        description="Tall outline with no base. Sharp cutting edge for cookies and clay.",
        defaults=ProfileSettings(
            thickness=12.0,
            base_thickness=0.0,
            offset=0.5,
            simplify_tolerance=0.2,
            remove_islands_threshold=2.0,
            bevel=0.0,
        ),
        constraints=ProfileConstraints(
            thickness_range=(8.0, 20.0),
            base_thickness_range=(0.0, 2.0),
            offset_range=(0.0, 3.0),
            simplify_tolerance_range=(0.1, 1.0),
            bevel_range=(0.0, 1.0),
        ),
    ),
    Profile(
        id="stamp",
        name="Stamp",
        description="Thick base with shallow relief. For ink stamps and embossing.",
        defaults=ProfileSettings(
            thickness=1.5,
            base_thickness=8.0,
            offset=-0.2,
            simplify_tolerance=0.05,
            remove_islands_threshold=0.3,
            bevel=0.0,
        ),
        constraints=ProfileConstraints(
            thickness_range=(0.5, 3.0),
            base_thickness_range=(5.0, 15.0),
            offset_range=(-1.0, 1.0),
            simplify_tolerance_range=(0.01, 0.5),
            bevel_range=(0.0, 1.0),
        ),
    ),
    Profile(
        id="keychain",
        name="Keychain",
        description="Moderate thickness with a small base and softened top edges.",
        defaults=ProfileSettings(
            thickness=2.0,
            base_thickness=1.0,
            offset=0.0,
            simplify_tolerance=0.1,
            remove_islands_threshold=0.5,
            bevel=0.3,
        ),
        constraints=ProfileConstraints(
            thickness_range=(1.5, 4.0),
            base_thickness_range=(0.5, 2.0),
            offset_range=(-1.0, 1.0),
            simplify_tolerance_range=(0.05, 0.5),
            bevel_range=(0.0, 1.0),
        ),
    ),
]

DEFAULT_PROFILE_ID = "logo-sign"


def get_profile(profile_id: str) -> Profile | None:
    """Look up a preset profile by id."""
    for profile in PROFILES:
        if profile.id == profile_id:
            return profile
    return None
