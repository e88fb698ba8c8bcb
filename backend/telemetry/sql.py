from __future__ import annotations

CREATE_EVENTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS cluster_events (
  ts_ms BIGINT,
  endpoint TEXT,
  projection TEXT,
  span_lat DOUBLE,
  span_lon DOUBLE,
  input_points INTEGER,
  visible_points INTEGER,
  clusters INTEGER,
  pinned BOOLEAN,
  stats_json TEXT
);
"""

SUMMARY_SQL_TEMPLATE = """
SELECT
  endpoint,
  projection,
  COUNT(*) AS n,
  AVG(visible_points) AS avg_visible_points,
  AVG(clusters) AS avg_clusters,
  AVG(try_cast(json_extract(stats_json, '$.timingsMs.total') AS DOUBLE)) AS avg_total_ms,
  quantile_cont(try_cast(json_extract(stats_json, '$.timingsMs.total') AS DOUBLE), 0.50) AS p50_total_ms,
  quantile_cont(try_cast(json_extract(stats_json, '$.timingsMs.total') AS DOUBLE), 0.95) AS p95_total_ms
FROM cluster_events
{where_sql}
GROUP BY endpoint, projection
ORDER BY endpoint, projection
"""

INSERT_EVENTS_SQL = """
INSERT INTO cluster_events
  (ts_ms, endpoint, projection, span_lat, span_lon, input_points, visible_points, clusters, pinned, stats_json)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""
