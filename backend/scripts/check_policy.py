"""
Validate the compiled-in policy table and print its role matrices.

Run this after editing the policy table or the permission schema. It exits
non-zero when the table is incomplete or malformed.

Usage:
    python -m scripts.check_policy
"""
import os
import sys

# Add parent directory to path to import backoffice modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backoffice.auth.rbac_contract import ALL_PAGES, FEATURE_ACTIONS, Role  # noqa: E402


def _mark(value: bool) -> str:
    return "x" if value else "."


def render_matrices(table) -> list[str]:
    roles = list(Role)
    width = max(
        len(f"{feature.value}.{action.value}")
        for feature, actions in FEATURE_ACTIONS.items()
        for action in actions
    )
    header = " " * width + "  " + "  ".join(f"{role.value:>7}" for role in roles)

    lines = ["Pages", header]
    for page in ALL_PAGES:
        marks = "  ".join(f"{_mark(table[role].can_see(page)):>7}" for role in roles)
        lines.append(f"{page.value:<{width}}  {marks}")

    lines.extend(["", "Features", header])
    for feature, actions in FEATURE_ACTIONS.items():
        for action in actions:
            label = f"{feature.value}.{action.value}"
            marks = "  ".join(
                f"{_mark(table[role].allows(feature, action)):>7}" for role in roles
            )
            lines.append(f"{label:<{width}}  {marks}")
    return lines


def main() -> int:
    # Importing the table runs validation; a defect surfaces as RuntimeError
    try:
        from backoffice.auth.policy_table import DEFAULT_POLICY
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print("\n".join(render_matrices(DEFAULT_POLICY)))
    print("\nPolicy table OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
