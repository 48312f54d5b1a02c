from datetime import datetime
from datetime import timezone

from commitlib.report_models import CommitRecord
from commitlib.report_models import DayBucket


#============================================
def utc_day_key(timestamp: datetime) -> str:
	"""
	Return the YYYY-MM-DD UTC calendar date for one commit timestamp.
	"""
	if timestamp.tzinfo is None:
		timestamp = timestamp.replace(tzinfo=timezone.utc)
	return timestamp.astimezone(timezone.utc).isoformat()[:10]


#============================================
def group_commits_by_day(commits: list[CommitRecord]) -> dict[str, DayBucket]:
	"""
	Group commits into per-day buckets keyed by UTC calendar date.

	Buckets appear in first-seen order and commits keep their input order
	inside each bucket.
	"""
	buckets: dict[str, DayBucket] = {}
	for commit in commits:
		day_key = utc_day_key(commit.timestamp)
		if day_key not in buckets:
			buckets[day_key] = DayBucket(calendar_date=day_key)
		buckets[day_key].commits.append(commit)
	return buckets


#============================================
def count_bucket_commits(buckets: dict[str, DayBucket]) -> int:
	"""
	Count commits across all buckets.
	"""
	return sum(len(bucket.commits) for bucket in buckets.values())
