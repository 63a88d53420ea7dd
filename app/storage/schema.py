# Collections and stored field names. Documents keep snake_case keys.
TRACER = "tracer"
USER = "user"
CHECK_IN = "check_in"

ID = "_id"
CLASS_NAME = "class_name"
STATUS = "status"
CRAWL_COUNT = "crawl_count"
START_TIME = "start_time"
UPDATE_TIME = "update_time"
MSG = "msg"
EXP = "exp"

SPIDER_TASK = "SpiderTask"
PROGRESS_TASK = "ProgressTask"
EXISTS_TASK = "ExistsTask"

USER_EXP_BOUNDARIES = (0, 100, 500, 1000, 2000, 3000, 5000)
NOT_CHECKED_IN_BUCKET = "not yet checked in"
