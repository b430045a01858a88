"""Application constants.

Table names, user-facing messages, and display limits shared by the
browse, projects, and messages services.
"""

# ---------------------------------------------------------------------------
# Postgres error codes surfaced through PostgREST
# ---------------------------------------------------------------------------
UNIQUE_VIOLATION: str = "23505"

# ---------------------------------------------------------------------------
# Embedded selects (PostgREST resource embedding)
# ---------------------------------------------------------------------------
SENDER_EMBED: str = "sender:profiles!messages_sender_id_fkey(full_name, avatar_url)"

CONVERSATION_SELECT: str = (
    "*, "
    "conversation_participants(user_id, profiles(full_name, avatar_url, role)), "
    f"messages(id, content, created_at, {SENDER_EMBED})"
)
MESSAGE_SELECT: str = f"*, {SENDER_EMBED}"

CODER_SELECT: str = "*, user_skills(skills(name, category))"
TEAM_SELECT: str = (
    "*, "
    "owner:profiles!teams_owner_id_fkey(*), "
    "team_members(role, profiles(*))"
)

PROJECT_SELECT: str = (
    "*, "
    "project_skills(skills(name, category)), "
    "hirer:profiles!projects_hirer_id_fkey(full_name, avatar_url)"
)
MY_APPLICATIONS_SELECT: str = (
    "*, projects(title, hirer:profiles!projects_hirer_id_fkey(full_name))"
)
PROJECT_APPLICATIONS_SELECT: str = (
    "*, coder:profiles!project_applications_coder_id_fkey(*)"
)

# ---------------------------------------------------------------------------
# Display limits for cards
# ---------------------------------------------------------------------------
CODER_CARD_SKILLS: int = 3
PROJECT_CARD_SKILLS: int = 4

# ---------------------------------------------------------------------------
# User-facing messages
# ---------------------------------------------------------------------------
MSG_ALREADY_APPLIED: str = "You have already applied to this project"
MSG_APPLY_FAILED: str = "Failed to apply to project"
MSG_APPLIED: str = "Application submitted successfully"
MSG_CONVERSATIONS_FAILED: str = "Failed to load conversations"
MSG_MESSAGES_FAILED: str = "Failed to load messages"
MSG_SEND_FAILED: str = "Failed to send message"
MSG_CONVERSATION_START_FAILED: str = "Failed to start conversation"
MSG_PROJECTS_FAILED: str = "Failed to load projects"
MSG_PROJECT_CREATE_FAILED: str = "Failed to post project"
MSG_APPLICATIONS_FAILED: str = "Failed to load applications"
MSG_CODERS_FAILED: str = "Failed to load coders"
MSG_TEAMS_FAILED: str = "Failed to load teams"
MSG_FOLLOW_FAILED: str = "Failed to follow user"
MSG_INVALID_COMMAND: str = "Invalid command"
MSG_LIVE_UPDATES_FAILED: str = "Failed to connect to live updates"
MSG_PROFILE_FAILED: str = "Failed to load profile"

UNKNOWN_CONVERSATION_NAME: str = "Unknown"
BUDGET_NOT_SPECIFIED: str = "Budget not specified"
