# Compares a multi-subnet result across vantage points.
# It answers "which regions/ISPs see which answer" for a single query.

from typing import Any, Dict, List

import pandas as pd

from subnets.fanout import MultiSubnetQueryResult

NO_ANSWER = "(no answer)"
FAILED = "(query failed)"

COLUMNS = [
    "country", "region", "province", "isp", "subnet",
    "success", "status", "rcode", "answers", "last_cname", "ecs_scope", "error",
]

GROUP_COLUMNS = ["answers", "count", "isps", "provinces"]
STATUS_COLUMNS = ["status", "count"]
ISP_COLUMNS = ["isp", "succeeded", "failed"]


def _answer_key(records) -> str:
    # CNAME hops are reported separately (last_cname); compare the final data only
    data = sorted(r.rdata for r in records if r.type != "CNAME")
    return ", ".join(data) if data else NO_ANSWER


def fanout_frame(result: MultiSubnetQueryResult) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []

    for ok in result.successful_results:
        parsed = ok.result.parsed
        rows.append({
            **ok.subnet_info.to_dict(),
            "success": True,
            "status": parsed.status,
            "rcode": parsed.rcode(),
            "answers": _answer_key(parsed.answer),
            "last_cname": parsed.last_cname or "",
            "ecs_scope": parsed.subnet.scope if parsed.subnet else None,
            "error": "",
        })

    for bad in result.failed_results:
        rows.append({
            **bad.subnet_info.to_dict(),
            "success": False,
            "status": "FAILED",
            "rcode": None,
            "answers": FAILED,
            "last_cname": "",
            "ecs_scope": None,
            "error": bad.error,
        })

    df = pd.DataFrame(rows, columns=COLUMNS)
    if df.empty:
        return df
    return df.sort_values(["success", "region", "province", "isp"], ascending=[False, True, True, True]).reset_index(drop=True)


def answer_groups(df: pd.DataFrame) -> pd.DataFrame:
    """One row per distinct answer set among successful rows, most common first."""
    if df is None or df.empty:
        return pd.DataFrame(columns=GROUP_COLUMNS)

    ok = df[df["success"].astype(bool)]
    if ok.empty:
        return pd.DataFrame(columns=GROUP_COLUMNS)

    return (
        ok.groupby("answers")
          .agg(
              count=("subnet", "size"),
              isps=("isp", lambda s: ", ".join(sorted(set(s)))),
              provinces=("province", lambda s: ", ".join(sorted(set(s)))),
          )
          .reset_index()
          .sort_values(["count", "answers"], ascending=[False, True])
          .reset_index(drop=True)
    )


def summarize(df: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """Counts by status (failed runs count as FAILED) and successes/failures per ISP."""
    if df is None or df.empty:
        return {
            "counts_by_status": pd.DataFrame(columns=STATUS_COLUMNS),
            "counts_by_isp": pd.DataFrame(columns=ISP_COLUMNS),
        }

    counts_by_status = (
        df.groupby("status")
          .size()
          .reset_index(name="count")
          .sort_values(["count", "status"], ascending=[False, True])
          .reset_index(drop=True)
    )

    success = df["success"].astype(bool)
    counts_by_isp = (
        df.assign(succeeded=success.astype(int), failed=(~success).astype(int))
          .groupby("isp", as_index=False)[["succeeded", "failed"]]
          .sum()
          .sort_values("isp")
          .reset_index(drop=True)
    )

    return {"counts_by_status": counts_by_status, "counts_by_isp": counts_by_isp}


class Comparison:
    """
    Single public analytics API for a fan-out result.

    Always returns the same keys so the CLI/plotter never has to special-case:
      answer_groups     one row per distinct answer set, with how many vantage points saw it
      counts_by_status  status -> count (failed runs count as FAILED)
      counts_by_isp     isp -> successes / failures
    """

    @staticmethod
    def compute(df: pd.DataFrame) -> Dict[str, pd.DataFrame]:
        return {"answer_groups": answer_groups(df), **summarize(df)}
