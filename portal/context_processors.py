"""Template context shared by every portal page."""
from django.urls import reverse

NAV_ITEMS = [
    ("portal:dashboard", "Dashboard", False),
    ("portal:requests", "Time Off", False),
    ("portal:announcements", "Announcements", False),
    ("portal:directory", "Directory", False),
    ("portal:reports", "Reports", True),
    ("portal:profile", "Profile", False),
]


def portal(request):
    context = getattr(request, "portal", None)
    if context is None:
        return {}
    user = context.session.current
    if user is None:
        return {"portal_user": None, "nav_items": []}
    nav_items = []
    for route, label, admin_only in NAV_ITEMS:
        if admin_only and not user.is_admin:
            continue
        url = reverse(route)
        nav_items.append({"url": url, "label": label, "active": request.path == url})
    return {"portal_user": user, "nav_items": nav_items}
