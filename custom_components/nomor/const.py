# File: const.py
"""Constants for the Nomor integration.

This file centralizes configuration keys, defaults, storage namespaces, service
and field names, dispatcher signal suffixes, translation keys and the career
track catalog used across the integration.
"""

import logging
from typing import Final

from homeassistant.const import Platform

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
NOMOR_TITLE = "Nomor"

DOMAIN = "nomor"

LOGGER = logging.getLogger(__package__)

PLATFORMS = [
    Platform.BUTTON,
    Platform.SELECT,
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORE = "store"
STORAGE_KEY = "nomor_data"
STORAGE_VERSION = 1
STORAGE_SAVE_DELAY = 2

# Update Interval (minutes) for rollover / session safety checks
DEFAULT_UPDATE_INTERVAL = 1

# Daily rollover at local midnight
DEFAULT_DAILY_RESET_TIME = {"hour": 0, "minute": 0, "second": 0}

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_API_KEY = "api_key"
CONF_MODEL = "model"
CONF_ENABLE_LAUNCHER = "enable_launcher"
CONF_NOTIFY_SERVICE = "notify_service"
CONF_AUTO_GENERATE_QUIZ = "auto_generate_quiz"

DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_ENABLE_LAUNCHER = False
DEFAULT_NOTIFY_SERVICE = ""
DEFAULT_AUTO_GENERATE_QUIZ = True

# ------------------------------------------------------------------------------------------------
# Text Generation
# ------------------------------------------------------------------------------------------------
LLM_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
LLM_DEFAULT_MAX_TOKENS = 12000
LLM_MOTIVATION_MAX_TOKENS = 300
LLM_TEMPERATURE = 0.7
LLM_REQUEST_TIMEOUT = 60

# ------------------------------------------------------------------------------------------------
# Launcher
# ------------------------------------------------------------------------------------------------
LAUNCHER_STOP_TIMEOUT = 5

# ------------------------------------------------------------------------------------------------
# Storage Layout
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_SELECTED_TRACK = "selected_track"
DATA_GLOBAL = "global"
DATA_TRACKS = "tracks"

SCHEMA_VERSION_CURRENT = 1

# Global namespaces
DATA_COINS = "coins"
DATA_HISTORY = "history"
DATA_ACTIVE_SESSION = "active_session"
DATA_APPS = "apps"
DATA_APPS_AUTO_CATEGORIZED = "apps_auto_categorized"

# Per-track namespaces
DATA_DSA_STREAK = "dsa_streak"
DATA_DSA_COMPLETED_TODAY = "dsa_completed_today"
DATA_LAST_DSA_DATE = "last_dsa_date"
DATA_MCQ_QUESTIONS = "mcq_questions"
DATA_MCQ_ANSWERS = "mcq_answers"
DATA_MCQ_COMPLETED_COUNT = "mcq_completed_count"
DATA_LAST_MCQ_DATE = "last_mcq_date"
DATA_MCQ_STREAK = "mcq_streak"
DATA_LAST_MCQ_COMPLETED_DATE = "last_mcq_completed_date"
DATA_MOTIVATION_QUOTE = "motivation_quote"
DATA_LAST_MOTIVATION_DATE = "last_motivation_date"

# Question / answer fields
DATA_QUESTION_TEXT = "question"
DATA_QUESTION_OPTIONS = "options"
DATA_QUESTION_CORRECT = "correct"
DATA_QUESTION_DIFFICULTY = "difficulty"
DATA_ANSWER_SELECTED = "selected"
DATA_ANSWER_CORRECT = "correct"

# History entry fields
DATA_HISTORY_ID = "id"
DATA_HISTORY_TYPE = "type"
DATA_HISTORY_REASON = "reason"
DATA_HISTORY_AMOUNT = "amount"
DATA_HISTORY_TS = "ts"

HISTORY_TYPE_EARN = "earn"
HISTORY_TYPE_SPEND = "spend"
HISTORY_TYPE_INFO = "info"

# Session fields
DATA_SESSION_CATEGORY = "category"
DATA_SESSION_APP = "app"
DATA_SESSION_STARTED_AT = "started_at"
DATA_SESSION_ENDS_AT = "ends_at"
DATA_SESSION_MINUTES = "minutes"

# Managed app fields
DATA_APP_ID = "id"
DATA_APP_NAME = "name"
DATA_APP_PATH = "path"

# ------------------------------------------------------------------------------------------------
# Economy
# ------------------------------------------------------------------------------------------------
CATEGORY_GAME = "game"
CATEGORY_MUSIC = "music"
CATEGORY_SOCIAL = "social"
APP_CATEGORIES = [CATEGORY_GAME, CATEGORY_MUSIC, CATEGORY_SOCIAL]

# Minutes of access granted per coin
COIN_RATES: Final = {
    CATEGORY_GAME: 15,
    CATEGORY_MUSIC: 30,
    CATEGORY_SOCIAL: 5,
}

DSA_REWARD_COINS = 2
MCQ_CORRECT_REWARD = 0.2
MCQ_QUESTION_COUNT = 15
MCQ_OPTION_COUNT = 4
MCQ_DIFFICULTIES = ["easy", "medium", "hard"]

DIFFICULTY_EASY = "easy"
DIFFICULTY_MEDIUM = "medium"
DIFFICULTY_HARD = "hard"
LEETCODE_REWARDS: Final = {
    DIFFICULTY_EASY: 1,
    DIFFICULTY_MEDIUM: 2,
    DIFFICULTY_HARD: 3,
}

ACTIVITY_HACKATHON = "hackathon"
ACTIVITY_SELF_STUDY = "self_study"
STUDY_ACTIVITIES = [ACTIVITY_HACKATHON, ACTIVITY_SELF_STUDY]
STUDY_COINS_PER_HOUR = 1

# ------------------------------------------------------------------------------------------------
# History Reasons
# ------------------------------------------------------------------------------------------------
REASON_DSA_COMPLETED = "DSA Challenge Completed"
REASON_MCQ_CORRECT = "MCQ {number} - Correct"
REASON_MCQ_INCORRECT = "MCQ {number} - Incorrect"
REASON_SESSION_SPEND = "{category} - {app} ({minutes}m)"
REASON_SESSION_ENDED = "Session ended: {category} - {app} ({reason})"
REASON_TIME_EXPIRED = "Time expired"
REASON_STOPPED_MANUALLY = "Stopped manually"
REASON_REPLACED = "Replaced by new session"
REASON_TRACK_SELECTED = "Selected track: {name}"
REASON_APPS_CATEGORIZED = "Auto-categorized {count} apps using AI"
REASON_LEETCODE = "LeetCode {difficulty} problem"
REASON_LEETCODE_HELP = " (with help)"
REASON_STUDY = "{activity} - {hours}h"

# ------------------------------------------------------------------------------------------------
# Career Tracks
# ------------------------------------------------------------------------------------------------
TRACK_ID = "id"
TRACK_NAME = "name"
TRACK_DESCRIPTION = "description"
TRACK_ICON = "icon"
TRACK_SKILLS = "skills"
TRACK_ACHIEVERS = "achievers"

CAREER_TRACKS: Final = {
    "ds": {
        TRACK_ID: "ds",
        TRACK_NAME: "Data Scientist",
        TRACK_DESCRIPTION: "Master statistics, ML algorithms, and data storytelling",
        TRACK_ICON: "mdi:chart-box-outline",
        TRACK_SKILLS: ["Statistics", "Python", "ML", "Data Visualization", "SQL"],
        TRACK_ACHIEVERS: ["Andrew Ng", "Cassie Kozyrkov", "Hilary Mason"],
    },
    "de": {
        TRACK_ID: "de",
        TRACK_NAME: "Data Engineer",
        TRACK_DESCRIPTION: "Build robust data pipelines and infrastructure",
        TRACK_ICON: "mdi:pipe-wrench",
        TRACK_SKILLS: ["ETL", "SQL", "Python", "Spark", "Cloud Platforms"],
        TRACK_ACHIEVERS: ["Maxime Beauchemin", "Jay Kreps", "Martin Kleppmann"],
    },
    "swe": {
        TRACK_ID: "swe",
        TRACK_NAME: "Software Engineer",
        TRACK_DESCRIPTION: "Create scalable applications and systems",
        TRACK_ICON: "mdi:laptop",
        TRACK_SKILLS: ["DSA", "System Design", "APIs", "Databases", "Testing"],
        TRACK_ACHIEVERS: ["Linus Torvalds", "Guido van Rossum", "John Carmack"],
    },
    "mle": {
        TRACK_ID: "mle",
        TRACK_NAME: "Machine Learning Engineer",
        TRACK_DESCRIPTION: "Deploy ML models to production at scale",
        TRACK_ICON: "mdi:robot-outline",
        TRACK_SKILLS: ["ML Ops", "Model Deployment", "Python", "Docker", "Kubernetes"],
        TRACK_ACHIEVERS: ["Chip Huyen", "Jeremy Howard", "Rachel Thomas"],
    },
    "dle": {
        TRACK_ID: "dle",
        TRACK_NAME: "Deep Learning Engineer",
        TRACK_DESCRIPTION: "Build and train neural networks for complex problems",
        TRACK_ICON: "mdi:brain",
        TRACK_SKILLS: [
            "Neural Networks",
            "PyTorch/TensorFlow",
            "GPUs",
            "Research Papers",
        ],
        TRACK_ACHIEVERS: ["Andrej Karpathy", "Ian Goodfellow", "Yann LeCun"],
    },
    "cve": {
        TRACK_ID: "cve",
        TRACK_NAME: "Computer Vision Engineer",
        TRACK_DESCRIPTION: "Teach machines to see and understand images",
        TRACK_ICON: "mdi:eye-outline",
        TRACK_SKILLS: [
            "CNNs",
            "Image Processing",
            "OpenCV",
            "Object Detection",
            "Segmentation",
        ],
        TRACK_ACHIEVERS: ["Fei-Fei Li", "Kaiming He", "Ross Girshick"],
    },
}

MOTIVATION_FALLBACK = (
    "Every expert {name} was once a beginner. Keep learning, keep building, "
    "and trust the process. Your consistent effort today shapes your expertise "
    "tomorrow."
)

# ------------------------------------------------------------------------------------------------
# Dispatcher Signals (suffixes, scoped per config entry)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_REWARD_EARNED = "reward_earned"
SIGNAL_SUFFIX_ACTIVITY_LOGGED = "activity_logged"
SIGNAL_SUFFIX_COINS_CHANGED = "coins_changed"
SIGNAL_SUFFIX_DSA_COMPLETED = "dsa_completed"
SIGNAL_SUFFIX_MCQ_ANSWERED = "mcq_answered"
SIGNAL_SUFFIX_MCQ_COMPLETED = "mcq_completed"
SIGNAL_SUFFIX_QUESTIONS_GENERATED = "questions_generated"
SIGNAL_SUFFIX_MOTIVATION_UPDATED = "motivation_updated"
SIGNAL_SUFFIX_APPS_CHANGED = "apps_changed"
SIGNAL_SUFFIX_SESSION_STARTED = "session_started"
SIGNAL_SUFFIX_SESSION_ENDED = "session_ended"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_SELECT_TRACK = "select_track"
SERVICE_COMPLETE_DSA = "complete_dsa"
SERVICE_GENERATE_QUESTIONS = "generate_questions"
SERVICE_SELECT_ANSWER = "select_answer"
SERVICE_START_SESSION = "start_session"
SERVICE_STOP_SESSION = "stop_session"
SERVICE_ADD_APP = "add_app"
SERVICE_REMOVE_APP = "remove_app"
SERVICE_EARN_LEETCODE = "earn_leetcode"
SERVICE_EARN_SELF_STUDY = "earn_self_study"
SERVICE_REFRESH_MOTIVATION = "refresh_motivation"
SERVICE_CATEGORIZE_APPS = "categorize_apps"

FIELD_TRACK_ID = "track_id"
FIELD_QUESTION_INDEX = "question_index"
FIELD_OPTION_INDEX = "option_index"
FIELD_CATEGORY = "category"
FIELD_COINS = "coins"
FIELD_APP_ID = "app_id"
FIELD_NAME = "name"
FIELD_PATH = "path"
FIELD_DIFFICULTY = "difficulty"
FIELD_HELP_USED = "help_used"
FIELD_HOURS = "hours"
FIELD_ACTIVITY = "activity"
FIELD_FORCE = "force"
FIELD_REASON = "reason"

# ------------------------------------------------------------------------------------------------
# Translation Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_INVALID_API_KEY = "invalid_api_key"
TRANS_KEY_ERROR_INVALID_NOTIFY_SERVICE = "invalid_notify_service"
TRANS_KEY_ERROR_NO_CONFIG_ENTRY = "no_config_entry"
TRANS_KEY_ERROR_NO_TRACK_SELECTED = "no_track_selected"
TRANS_KEY_ERROR_INVALID_TRACK = "invalid_track"
TRANS_KEY_ERROR_ALREADY_COMPLETED = "already_completed_today"
TRANS_KEY_ERROR_QUESTIONS_EXIST = "questions_already_generated"
TRANS_KEY_ERROR_QUESTIONS_OUTDATED = "questions_outdated"
TRANS_KEY_ERROR_GENERATION_IN_PROGRESS = "generation_in_progress"
TRANS_KEY_ERROR_GENERATION_FAILED = "question_generation_failed"
TRANS_KEY_ERROR_INVALID_QUESTION = "invalid_question"
TRANS_KEY_ERROR_INSUFFICIENT_COINS = "insufficient_coins"
TRANS_KEY_ERROR_INVALID_DURATION = "invalid_duration"
TRANS_KEY_ERROR_NOT_FOUND = "not_found"
TRANS_KEY_ERROR_TEXT_GENERATION = "text_generation_failed"
TRANS_KEY_ERROR_LAUNCH_FAILED = "launch_failed"

# Entity translation keys
TRANS_KEY_SENSOR_COINS = "coins"
TRANS_KEY_SENSOR_DSA_STREAK = "dsa_streak"
TRANS_KEY_SENSOR_MCQ_STREAK = "mcq_streak"
TRANS_KEY_SENSOR_MCQ_PROGRESS = "mcq_progress"
TRANS_KEY_SENSOR_MCQ_SCORE = "mcq_score"
TRANS_KEY_SENSOR_SESSION = "active_session"
TRANS_KEY_SENSOR_TIME_UNTIL_RESET = "time_until_reset"
TRANS_KEY_SENSOR_MOTIVATION = "motivation"
TRANS_KEY_SELECT_TRACK = "career_track"
TRANS_KEY_BUTTON_COMPLETE_DSA = "complete_dsa"
TRANS_KEY_BUTTON_STOP_SESSION = "stop_session"
TRANS_KEY_BUTTON_GENERATE_QUESTIONS = "generate_questions"

# Notifications
NOTIFICATION_ID_PREFIX = "nomor_"
NOTIFY_TITLE = "Nomor"

# Entity attributes
ATTR_HISTORY = "history"
ATTR_TOTAL_EARNED = "total_earned"
ATTR_TOTAL_SPENT = "total_spent"
ATTR_QUESTIONS = "questions"
ATTR_ANSWERS = "answers"
ATTR_CATEGORY = "category"
ATTR_APP_NAME = "app_name"
ATTR_ENDS_AT = "ends_at"
ATTR_HOURS = "hours"
ATTR_MINUTES = "minutes"
ATTR_LAST_DATE = "last_date"
ATTR_TRACK = "track"
ATTR_COMPLETED_TODAY = "completed_today"
ATTR_TOTAL = "total"
ATTR_CORRECT = "correct"

HISTORY_ATTRIBUTE_LIMIT = 10

# Coordinator snapshot keys (beyond the DATA_* storage keys it reuses)
SNAPSHOT_MCQ_SCORE = "mcq_score"
SNAPSHOT_GENERATING = "generating"
SNAPSHOT_REMAINING_MINUTES = "remaining_minutes"
SNAPSHOT_TOTAL_EARNED = "total_earned"
SNAPSHOT_TOTAL_SPENT = "total_spent"

# Notification ids
NOTIFY_ID_SESSION_EXPIRED = "session_expired"
NOTIFY_ID_GENERATION_FAILED = "question_generation_failed"
NOTIFY_ID_LAUNCH_FAILED = "launch_failed"

MSG_SESSION_EXPIRED = "Time's up! Your {category} session with {app} has ended."
MSG_GENERATION_FAILED = "Could not generate today's quiz: {error}"
MSG_LAUNCH_FAILED = "Could not launch {app}: {error}"

ATTR_QUOTE = "quote"
ATTR_GENERATING = "generating"
STATE_MAX_LENGTH = 255
UNIT_COINS = "coins"
