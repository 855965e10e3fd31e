from churchhub.models import AppRole

PASTOR_OR_ADMIN = [AppRole.PASTOR, AppRole.ADMIN]

DASHBOARD_CARDS = [
    {"id": "events", "title": "Events", "description": "View upcoming services and events", "href": "/events"},
    {"id": "sermons", "title": "Sermons", "description": "Watch and download messages", "href": "/sermons"},
    {"id": "songs", "title": "Song Library", "description": "Browse lyrics and worship songs", "href": "/songs"},
    {"id": "missions", "title": "Missions", "description": "Explore our global outreach", "href": "/missions"},
    {"id": "giving", "title": "Giving", "description": "Give and view transparency", "href": "/giving"},
    {
        "id": "upload-sermon",
        "title": "Manage Sermons",
        "description": "Upload videos, audio & documents",
        "href": "/dashboard/sermons",
        "roles": PASTOR_OR_ADMIN,
    },
    {
        "id": "manage-events",
        "title": "Manage Events",
        "description": "Create and manage events",
        "href": "/dashboard/events",
        "roles": PASTOR_OR_ADMIN,
    },
    {
        "id": "manage-missions",
        "title": "Manage Missions",
        "description": "Track outreach campaigns",
        "href": "/dashboard/missions",
        "roles": PASTOR_OR_ADMIN,
    },
    {
        "id": "worship",
        "title": "Manage Songs",
        "description": "Add & edit songs and lyrics",
        "href": "/dashboard/songs",
        "roles": [AppRole.WORSHIP_TEAM, AppRole.PASTOR, AppRole.ADMIN],
    },
    {
        "id": "finances",
        "title": "Financial Records",
        "description": "Manage church finances",
        "href": "/dashboard/finances",
        "roles": [AppRole.ADMIN],
    },
    {
        "id": "users",
        "title": "User Management",
        "description": "Manage members & roles",
        "href": "/dashboard/users",
        "roles": [AppRole.ADMIN],
    },
    {
        "id": "settings",
        "title": "Settings",
        "description": "Church settings & configuration",
        "href": "/dashboard/settings",
        "roles": [AppRole.ADMIN],
    },
]


class DashboardService:
    @staticmethod
    def get_dashboard(user_church):
        cards = []
        for card in DASHBOARD_CARDS:
            roles = card.get("roles")
            if roles and not user_church.holds_any(roles):
                continue
            cards.append({key: value for key, value in card.items() if key != "roles"})
        return {
            "church_name": user_church.church_name,
            "role": user_church.role.value if user_church.role else None,
            "cards": cards,
        }
