from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class SqlFormulation:
    name: str
    task: str
    description: str
    sql: str


TOP_DONATIONS = "top_donations_by_donor_type"
REGIONAL_IMPACT = "regional_top_impact"

# Amounts are cast to DECIMAL before summing so the total is exact; ROUND on a
# DECIMAL rounds half away from zero, which is half-up for non-negative amounts.
_EXACT_AMOUNT = "CAST(d.amount AS DECIMAL(38, 10))"

TOP_DONATIONS_JOIN_GROUP = SqlFormulation(
    name="join_group",
    task=TOP_DONATIONS,
    description="Join all three tables, then GROUP BY assignment and donor type.",
    sql=f"""
    SELECT
        a.assignment_name,
        a.region,
        dn.donor_type,
        CAST(ROUND(SUM({_EXACT_AMOUNT}), 2) AS DOUBLE) AS rounded_total_donation_amount
    FROM donations AS d
    JOIN donors AS dn ON d.donor_id = dn.donor_id
    JOIN assignments AS a ON d.assignment_id = a.assignment_id
    GROUP BY a.assignment_id, a.assignment_name, a.region, dn.donor_type
    ORDER BY rounded_total_donation_amount DESC, a.assignment_id ASC, dn.donor_type ASC NULLS LAST
    LIMIT $top_n
    """,
)

TOP_DONATIONS_CTE = SqlFormulation(
    name="cte_preaggregate",
    task=TOP_DONATIONS,
    description="Pre-aggregate donations per assignment and donor type in a CTE, then attach assignment details.",
    sql=f"""
    WITH donor_totals AS (
        SELECT
            d.assignment_id,
            dn.donor_type,
            ROUND(SUM({_EXACT_AMOUNT}), 2) AS total_amount
        FROM donations AS d
        JOIN donors AS dn ON d.donor_id = dn.donor_id
        GROUP BY d.assignment_id, dn.donor_type
    )
    SELECT
        a.assignment_name,
        a.region,
        t.donor_type,
        CAST(t.total_amount AS DOUBLE) AS rounded_total_donation_amount
    FROM donor_totals AS t
    JOIN assignments AS a ON t.assignment_id = a.assignment_id
    ORDER BY t.total_amount DESC, a.assignment_id ASC, t.donor_type ASC NULLS LAST
    LIMIT $top_n
    """,
)

REGIONAL_IMPACT_WINDOW = SqlFormulation(
    name="window_rank",
    task=REGIONAL_IMPACT,
    description="Count donations in a CTE and keep ROW_NUMBER() = 1 per region.",
    sql="""
    WITH donation_counts AS (
        SELECT assignment_id, COUNT(*) AS num_total_donations
        FROM donations
        GROUP BY assignment_id
    ),
    ranked AS (
        SELECT
            a.assignment_name,
            a.region,
            a.impact_score,
            c.num_total_donations,
            ROW_NUMBER() OVER (
                PARTITION BY a.region
                ORDER BY a.impact_score DESC, a.assignment_id ASC
            ) AS rank_in_region
        FROM assignments AS a
        JOIN donation_counts AS c ON a.assignment_id = c.assignment_id
        WHERE c.num_total_donations > 0
    )
    SELECT assignment_name, region, impact_score, num_total_donations
    FROM ranked
    WHERE rank_in_region = 1
    ORDER BY region ASC NULLS LAST
    """,
)

REGIONAL_IMPACT_DISTINCT_ON = SqlFormulation(
    name="distinct_on",
    task=REGIONAL_IMPACT,
    description="DISTINCT ON (region) over assignments ordered by impact score.",
    sql="""
    SELECT assignment_name, region, impact_score, num_total_donations
    FROM (
        SELECT DISTINCT ON (a.region)
            a.assignment_name,
            a.region,
            a.impact_score,
            COUNT(d.donation_id) AS num_total_donations
        FROM assignments AS a
        JOIN donations AS d ON a.assignment_id = d.assignment_id
        GROUP BY a.assignment_id, a.assignment_name, a.region, a.impact_score
        HAVING COUNT(d.donation_id) > 0
        ORDER BY a.region, a.impact_score DESC, a.assignment_id ASC
    ) AS best
    ORDER BY region ASC NULLS LAST
    """,
)

FORMULATIONS: Dict[str, List[SqlFormulation]] = {
    TOP_DONATIONS: [TOP_DONATIONS_JOIN_GROUP, TOP_DONATIONS_CTE],
    REGIONAL_IMPACT: [REGIONAL_IMPACT_WINDOW, REGIONAL_IMPACT_DISTINCT_ON],
}


def formulations_for(task: str) -> List[SqlFormulation]:
    if task not in FORMULATIONS:
        raise KeyError(f"Unknown task: {task}")
    return list(FORMULATIONS[task])
