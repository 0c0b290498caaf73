"""
Observation Queries Module.

Parameterized PostgreSQL queries over the data_points table, which holds the
metric observations evaluated by the rule engine.

A region query returns the region's own observations plus those filed under
the global region (e.g. 'Global'), which apply everywhere.
"""


def get_observations_by_region_query() -> str:
    """
    SQL to fetch observations for a region plus the global region.

    Parameters:
        $1: region
        $2: global region label

    Returns:
        Parameterized PostgreSQL query string.

    Note:
        Ordered by id so repeated reads of an unchanged table return
        observations in insertion order (latest-value ties resolve to the
        first one encountered).
    """
    return """
        SELECT metric, value, region, function, timestamp
        FROM data_points
        WHERE region = $1 OR region = $2
        ORDER BY id ASC
    """


def get_insert_observation_query() -> str:
    """
    SQL to insert one observation; used with executemany.

    Parameters:
        $1: metric, $2: value, $3: region, $4: function (nullable), $5: timestamp
    """
    return """
        INSERT INTO data_points (metric, value, region, function, timestamp)
        VALUES ($1, $2, $3, $4, $5)
    """


def get_delete_all_observations_query() -> str:
    """SQL to clear the data_points table (used by the seed routine)."""
    return "DELETE FROM data_points"
