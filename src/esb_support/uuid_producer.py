"""Random identifier generation."""

import uuid


def generate_uuid() -> str:
    """Return a random UUID4 in canonical 8-4-4-4-12 hex form."""
    return str(uuid.uuid4())


class UuidProducer:
    """
    Producer of UUIDs.

    Bean-style wrapper around generate_uuid() for routes that look up
    an identifier source by object rather than by function.
    """

    def get_uuid(self) -> str:
        return generate_uuid()
