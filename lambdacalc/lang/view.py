"""User-facing view of a KeywordTable. The view never decides what exists: it is brought in line with a snapshot of the
table, either one row at a time (upsert after a registration, delete after a removal) or all at once with reconcile.
"""

from dataclasses import dataclass

from termcolor import colored


@dataclass
class ViewRow:
    name: str
    definition: str


def diff(snapshot, rows):
    """Given snapshot (ordered (name, definition) pairs from KeywordTable.iterate) and the rows currently shown,
    returns (upserts, deletes): the (name, definition) pairs to upsert and the names to delete. Rows are matched by
    name only.
    """
    shown = {}
    for row in rows:
        shown.setdefault(row.name, []).append(row.definition)

    wanted = dict(snapshot)
    upserts = [(name, definition) for name, definition in snapshot if shown.get(name) != [definition]]
    deletes = [name for name in shown if name not in wanted]

    return upserts, deletes


class KeywordView:
    """Table of keyword rows, kept in the order rows were first shown."""

    def __init__(self):
        self.rows = []

    def find(self, name):
        """Returns the first row named name, or None. Linear scan: rows are not assumed to be unique."""
        for row in self.rows:
            if row.name == name:
                return row
        return None

    def upsert(self, name, definition):
        """Updates the definition of the row named name, or appends a new row."""
        row = self.find(name)
        if row is None:
            self.rows.append(ViewRow(name, definition))
            return

        row.definition = definition
        self.rows = [other for other in self.rows if other.name != name or other is row]  # drop duplicates

    def delete(self, name):
        """Deletes every row named name."""
        self.rows = [row for row in self.rows if row.name != name]

    def reconcile(self, snapshot):
        """Brings the view in line with snapshot. Returns the (upserts, deletes) that were applied."""
        upserts, deletes = diff(snapshot, self.rows)
        for name in deletes:
            self.delete(name)
        for name, definition in upserts:
            self.upsert(name, definition)
        return upserts, deletes

    def render(self):
        """Returns the view as aligned text, one row per line."""
        if not self.rows:
            return colored("no keywords defined", attrs=["dark"])

        width = max(len(row.name) for row in self.rows)
        lines = [colored(f"{'name':<{width}}  definition", attrs=["bold"])]
        for row in self.rows:
            lines.append(f"{row.name:<{width}}  {row.definition}")
        return "\n".join(lines)

    def __iter__(self):
        return iter(self.rows)

    def __len__(self):
        return len(self.rows)
