"""
visualizer.py - outcome distribution chart
Horizontal bar chart of a cross result, returned as a base64 PNG
"""

import io
import base64
import numpy as np
from typing import List, Optional, Sequence
from dataclasses import dataclass

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from .goals import matches_goal
from .models import Goal, Outcome


# ============================================================
# Chart settings
# ============================================================
@dataclass
class ChartConfig:
    # canvas
    fig_width: float = 8.0
    row_height: float = 0.45
    min_height: float = 2.5

    max_rows: int = 16

    # style
    bar_color: str = '#4C72B0'
    goal_color: str = '#DD8452'   # outcomes that satisfy a goal
    edge_color: str = 'black'
    line_width: float = 0.8

    font_size_label: int = 10
    font_size_title: int = 12
    dpi: int = 120


# ============================================================
# Chart engine
# ============================================================
class OutcomeVisualizer:
    def __init__(self, config: Optional[ChartConfig] = None):
        self.config = config or ChartConfig()

    def create_chart(
        self,
        outcomes: Sequence[Outcome],
        title: str = "",
        highlight: Optional[Sequence[bool]] = None,
        save_path: Optional[str] = None
    ) -> str:
        """
        Draw the chart and return it as base64 PNG

        highlight marks (per outcome) the bars drawn in goal_color.
        """
        cfg = self.config
        shown = list(outcomes[:cfg.max_rows])
        height = max(cfg.min_height, cfg.row_height * len(shown) + 1.0)
        fig, ax = plt.subplots(figsize=(cfg.fig_width, height))

        labels = [" ".join(o.labels) if o.labels else "Normal" for o in shown]
        probs = np.array([o.prob for o in shown]) * 100
        positions = np.arange(len(shown))

        colors = [
            cfg.goal_color if highlight is not None and i < len(highlight) and highlight[i]
            else cfg.bar_color
            for i in range(len(shown))
        ]

        ax.barh(positions, probs, color=colors,
                edgecolor=cfg.edge_color, linewidth=cfg.line_width)
        ax.set_yticks(positions)
        ax.set_yticklabels(labels, fontsize=cfg.font_size_label)
        ax.invert_yaxis()  # most likely outcome on top
        ax.set_xlim(0, 100)
        ax.set_xlabel("Probability (%)")

        for pos, value in zip(positions, probs):
            ax.text(value + 1, pos, f"{value:.1f}%", va='center', fontsize=cfg.font_size_label)

        if title:
            ax.set_title(title, fontsize=cfg.font_size_title)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=cfg.dpi, bbox_inches='tight', facecolor='white')

        buf = io.BytesIO()
        plt.savefig(buf, format='png', dpi=cfg.dpi, bbox_inches='tight', facecolor='white')
        buf.seek(0)
        img_base64 = base64.b64encode(buf.read()).decode('utf-8')
        plt.close(fig)
        return img_base64


def goal_highlights(outcomes: Sequence[Outcome], goals: Sequence[Goal]) -> Optional[List[bool]]:
    """Per outcome: does it satisfy any goal (None without goals)"""
    if not goals:
        return None
    return [any(matches_goal(o.labels, g) for g in goals) for o in outcomes]
