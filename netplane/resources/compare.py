from netplane.resources.base import Snapshot
from netplane.resources.errors import ComparisonError


def is_equal(a: Snapshot, b: Snapshot) -> bool:
    """
    Structural equality of two snapshots of the same kind.

    Name, cloud id and the tag mapping must match exactly; tag order is
    irrelevant. Anything other than two snapshots of one kind is an error.
    """
    for side, snapshot in (("left", a), ("right", b)):
        if not isinstance(snapshot, Snapshot):
            raise ComparisonError(
                f"Unable to compare {side} value of type [{type(snapshot).__name__}]"
            )
    if a.kind is not b.kind:
        raise ComparisonError(
            f"Unable to compare [{a.kind.value}] with [{b.kind.value}]"
        )
    return (
        a.name == b.name
        and a.cloud_id == b.cloud_id
        and dict(a.tags) == dict(b.tags)
    )
