import io
import textwrap
from typing import Any, Dict


class ComparisonCharts:
    """
    Renders a 1x2 PNG from Comparison.compute() output.

    Expected input:
      analytics: Dict[str, pandas.DataFrame]
        - answer_groups
        - counts_by_status

    Output:
      PNG bytes suitable for returning via FastAPI Response(content=..., media_type="image/png")
    """

    def __init__(
        self,
        top_groups: int = 10,
        label_width: int = 28,
        figsize: tuple[int, int] = (14, 6),
        dpi: int = 140,
    ) -> None:
        self.top_groups = top_groups
        self.label_width = label_width
        self.figsize = figsize
        self.dpi = dpi

    @staticmethod
    def _lazy_import_plotting():
        """
        Import heavy plotting libs only when needed.

        Keeps API startup light; only the chart endpoint pays for matplotlib.
        Figures are built directly, never through pyplot's global figure manager.
        """
        import pandas as pd  # noqa: F401
        from matplotlib.figure import Figure

        return pd, Figure

    def _label(self, text: str) -> str:
        return "\n".join(textwrap.wrap(str(text), self.label_width)[:3]) or str(text)

    def render_png(self, analytics: Dict[str, Any], title: str = "") -> bytes:
        pd, Figure = self._lazy_import_plotting()

        fig = Figure(figsize=self.figsize)
        axs = fig.subplots(1, 2)

        # 1) Vantage points per distinct answer set
        groups = analytics.get("answer_groups", pd.DataFrame())
        ax = axs[0]
        if groups is None or groups.empty:
            ax.text(0.5, 0.5, "no successful answers", ha="center", va="center")
            ax.set_axis_off()
        else:
            d = groups.head(self.top_groups)
            ax.barh([self._label(a) for a in d["answers"]], d["count"])
            ax.invert_yaxis()
            ax.set_title(f"Vantage points per answer set (top {min(self.top_groups, len(d))})")
            ax.set_xlabel("Subnets")

        # 2) Status breakdown
        status = analytics.get("counts_by_status", pd.DataFrame())
        ax = axs[1]
        if status is None or status.empty:
            ax.text(0.5, 0.5, "no results", ha="center", va="center")
            ax.set_axis_off()
        else:
            ax.bar(status["status"], status["count"])
            ax.set_title("Responses by status")
            ax.set_ylabel("Subnets")
            ax.tick_params(axis="x", rotation=30)

        if title:
            fig.suptitle(title)
        fig.tight_layout()

        buf = io.BytesIO()
        fig.savefig(buf, format="png", dpi=self.dpi, bbox_inches="tight")
        return buf.getvalue()
