class Memory:
    """Global variable store: case-insensitive names mapped to integers.

    Names that were never assigned read as 0.
    """

    def __init__(self):
        self.table = {}

    def get(self, name: str) -> int:
        return self.table.get(name.lower(), 0)

    def put(self, name: str, value: int):
        self.table[name.lower()] = value

    def __contains__(self, name):
        return name.lower() in self.table

    def __len__(self):
        return len(self.table)

    def items(self):
        return sorted(self.table.items())
