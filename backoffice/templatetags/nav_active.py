from django import template

register = template.Library()


@register.simple_tag(takes_context=True)
def active(context, url: str, cls="active"):
    """Mark a nav link active when the current path lives under it."""
    request = context.get("request")
    if request is None or not url:
        return ""
    path = request.path
    if url == "/":
        return cls if path == "/" else ""
    return cls if path.startswith(url) else ""
