from prometheus_client import Counter, Gauge

REGISTRATIONS = Counter('instaclone_registrations_total', 'Usernames registered')
UPLOADS = Counter('instaclone_uploads_total', 'Content items uploaded', ['type'])
DELETIONS = Counter('instaclone_deletions_total', 'Content items deleted by their owner')

SWEEP_RUNS = Counter('instaclone_sweep_runs_total', 'Retention sweeps run', ['outcome'])
SWEPT_ITEMS = Counter('instaclone_swept_items_total', 'Content items removed by retention sweeps')
LAST_SWEEP = Gauge('instaclone_last_sweep_timestamp_seconds', 'Unix time of the last completed sweep')
