"""
data_table.py - outcome table generator
Tabulates a cross result for terminal (markdown) or JSON output
"""

from typing import List, Dict, Optional, Any, Sequence
from dataclasses import dataclass, field

from .models import Outcome


NORMAL_LABEL = "Normal"


@dataclass
class OutcomeTableRow:
    """One row of the outcome table (one phenotype combination)"""
    labels: List[str]
    prob: float
    display: str = ""
    percent: str = ""

    def __post_init__(self):
        self.display = " ".join(self.labels) if self.labels else NORMAL_LABEL
        self.percent = f"{self.prob * 100:.2f}%"


@dataclass
class OutcomeTable:
    """Outcome table for one pairing"""
    rows: List[OutcomeTableRow] = field(default_factory=list)
    title: str = "Offspring outcomes"
    hidden_prob: float = 0.0  # probability mass of rows cut by the generator

    def add_row(self, row: OutcomeTableRow):
        self.rows.append(row)

    def to_dict(self) -> List[Dict[str, Any]]:
        return [
            {
                'phenotype': row.display,
                'labels': row.labels,
                'prob': row.prob,
                'percent': row.percent,
            }
            for row in self.rows
        ]

    def to_markdown(self) -> str:
        """Markdown table"""
        if not self.rows:
            return ""

        header_line = "| Phenotype | Probability |"
        separator = "|---|---|"
        data_lines = [f"| {row.display} | {row.percent} |" for row in self.rows]
        if self.hidden_prob > 0:
            data_lines.append(f"| (other) | {self.hidden_prob * 100:.2f}% |")

        return "\n".join([header_line, separator] + data_lines)


class OutcomeTableGenerator:
    """Builds OutcomeTable objects from cross results"""

    def generate_table(
        self,
        outcomes: Sequence[Outcome],
        limit: Optional[int] = None,
        title: Optional[str] = None
    ) -> OutcomeTable:
        """
        Outcome table

        Args:
            outcomes: cross result (descending probability)
            limit: keep only the first N rows, summarizing the rest as '(other)'
            title: table title

        Returns:
            OutcomeTable
        """
        table = OutcomeTable(title=title or "Offspring outcomes")
        shown = list(outcomes if limit is None else outcomes[:limit])

        for outcome in shown:
            table.add_row(OutcomeTableRow(labels=list(outcome.labels), prob=outcome.prob))

        if limit is not None:
            table.hidden_prob = sum(o.prob for o in outcomes[limit:])

        return table
