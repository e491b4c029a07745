# headpress/services/formatter.py
"""
Wire representations compatible with the WordPress REST API (wp/v2).

Every function here is pure: it receives a stored entity, the site base URL
and, where personal data is involved, whether the current viewer may see it.
Privilege is decided per request by the caller and never stored.
"""
import hashlib
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlencode

from headpress.models.comment import Comment
from headpress.models.content import Post, PostStatus
from headpress.models.link import Link, LinkCategory
from headpress.models.media import Media
from headpress.models.moment import Moment
from headpress.models.taxonomy import Category, Tag
from headpress.models.user import User

API_PREFIX = "/wp-json/wp/v2"
AVATAR_SIZES = (24, 48, 96)
GRAVATAR_URL = "https://www.gravatar.com/avatar"
CURIES = [{"name": "wp", "href": "https://api.w.org/{rel}", "templated": True}]


def normalize_base_url(base_url: str) -> str:
    return (base_url or "").rstrip("/")


def api_url(base_url: str, path: str) -> str:
    return f"{normalize_base_url(base_url)}{API_PREFIX}/{path.lstrip('/')}"


def _href(url: str, embeddable: bool = False, **extra) -> List[Dict[str, Any]]:
    link: Dict[str, Any] = {"href": url}
    if embeddable:
        link["embeddable"] = True
    link.update(extra)
    return [link]


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 in UTC without offset, the way WordPress prints `date_gmt`."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0).isoformat()


def email_hash(email: Optional[str]) -> str:
    """MD5 hex digest of the trimmed, lower-cased address (Gravatar key)."""
    normalized = (email or "").strip().lower()
    return hashlib.md5(normalized.encode("utf-8")).hexdigest()


def avatar_urls(email: Optional[str], avatar_url: Optional[str] = None) -> Dict[str, str]:
    if avatar_url:
        return {str(size): avatar_url for size in AVATAR_SIZES}
    digest = email_hash(email)
    return {
        str(size): f"{GRAVATAR_URL}/{digest}?s={size}&d=mm&r=g"
        for size in AVATAR_SIZES
    }


def pagination_headers(page: int, per_page: int, total: int, url: str,
                       params: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
    """
    X-WP-Total / X-WP-TotalPages, plus an RFC 5988 `Link` header with
    prev/next relations only when those pages exist.
    """
    total_pages = math.ceil(total / per_page) if per_page else 0
    headers = {
        "X-WP-Total": str(total),
        "X-WP-TotalPages": str(total_pages),
    }

    def page_url(number: int) -> str:
        query = dict(params or {})
        query.update({"page": number, "per_page": per_page})
        return f"{url}?{urlencode(query)}"

    links = []
    if page > 1 and total_pages > 0:
        links.append(f'<{page_url(min(page - 1, total_pages))}>; rel="prev"')
    if page < total_pages:
        links.append(f'<{page_url(page + 1)}>; rel="next"')
    if links:
        headers["Link"] = ", ".join(links)
    return headers


# --- Posts & pages ---------------------------------------------------------

def post_links(post: Post, base_url: str) -> Dict[str, Any]:
    collection = "pages" if post.post_type == "page" else "posts"
    return {
        "self": _href(api_url(base_url, f"{collection}/{post.id}")),
        "collection": _href(api_url(base_url, collection)),
        "about": _href(api_url(base_url, f"types/{post.post_type}")),
        "author": _href(api_url(base_url, f"users/{post.author_id}"), embeddable=True),
        "replies": _href(api_url(base_url, f"comments?post={post.id}"), embeddable=True),
        "version-history": [{
            "count": 1,
            "href": api_url(base_url, f"{collection}/{post.id}/revisions"),
        }],
        "wp:attachment": _href(api_url(base_url, f"media?parent={post.id}")),
        "wp:term": [
            {
                "taxonomy": "category",
                "embeddable": True,
                "href": api_url(base_url, f"categories?post={post.id}"),
            },
            {
                "taxonomy": "post_tag",
                "embeddable": True,
                "href": api_url(base_url, f"tags?post={post.id}"),
            },
        ],
        "curies": CURIES,
    }


def format_post(post: Post, base_url: str, categories: Iterable[int] = (),
                tags: Iterable[int] = ()) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    date = format_datetime(post.published_at or post.created_at)
    modified = format_datetime(post.updated_at)
    return {
        "id": post.id,
        "date": date,
        "date_gmt": date,
        "modified": modified,
        "modified_gmt": modified,
        "slug": post.slug,
        "status": post.status,
        "type": post.post_type,
        "link": f"{base}/{post.slug}",
        "title": {"rendered": post.title},
        "content": {
            "rendered": post.content or "",
            "protected": post.status == PostStatus.private.value,
        },
        "excerpt": {"rendered": post.excerpt or "", "protected": False},
        "author": post.author_id,
        "featured_media": post.featured_media_id or 0,
        "featured_image_url": post.featured_image_url,
        "comment_status": post.comment_status,
        "ping_status": "closed",
        "sticky": False,
        "template": "",
        "format": "standard",
        "meta": [],
        "categories": list(categories),
        "tags": list(tags),
        "comment_count": post.comment_count or 0,
        "view_count": post.view_count or 0,
        "_links": post_links(post, base),
    }


def format_page(page: Post, base_url: str, author_name: Optional[str] = None) -> Dict[str, Any]:
    data = format_post(page, base_url)
    for key in ("categories", "tags", "sticky", "format"):
        data.pop(key)
    data["parent"] = page.parent_id or 0
    data["author_name"] = author_name
    links = data["_links"]
    links.pop("wp:term")
    return data


# --- Taxonomies ------------------------------------------------------------

def format_category(category: Category, base_url: str) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    return {
        "id": category.id,
        "count": category.count or 0,
        "description": category.description or "",
        "link": f"{base}/category/{category.slug}",
        "name": category.name,
        "slug": category.slug,
        "taxonomy": "category",
        "parent": category.parent_id or 0,
        "meta": [],
        "_links": {
            "self": _href(api_url(base, f"categories/{category.id}")),
            "collection": _href(api_url(base, "categories")),
            "about": _href(api_url(base, "taxonomies/category")),
            "wp:post_type": _href(api_url(base, f"posts?categories={category.id}")),
            "curies": CURIES,
        },
    }


def format_tag(tag: Tag, base_url: str) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    return {
        "id": tag.id,
        "count": tag.count or 0,
        "description": tag.description or "",
        "link": f"{base}/tag/{tag.slug}",
        "name": tag.name,
        "slug": tag.slug,
        "taxonomy": "post_tag",
        "meta": [],
        "_links": {
            "self": _href(api_url(base, f"tags/{tag.id}")),
            "collection": _href(api_url(base, "tags")),
            "about": _href(api_url(base, "taxonomies/post_tag")),
            "wp:post_type": _href(api_url(base, f"posts?tags={tag.id}")),
            "curies": CURIES,
        },
    }


# --- Media -----------------------------------------------------------------

def format_media(media: Media, base_url: str) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    created = format_datetime(media.created_at)
    return {
        "id": media.id,
        "date": created,
        "date_gmt": created,
        "modified": created,
        "modified_gmt": created,
        "slug": media.filename,
        "status": "inherit",
        "type": "attachment",
        "link": media.url,
        "title": {"rendered": media.title},
        "author": media.author_id,
        "comment_status": "closed",
        "ping_status": "closed",
        "template": "",
        "meta": [],
        "description": {"rendered": media.description or ""},
        "caption": {"rendered": media.caption or ""},
        "alt_text": media.alt_text or "",
        "media_type": media.file_type,
        "mime_type": media.mime_type,
        "media_details": {
            "width": media.width,
            "height": media.height,
            "file": media.storage_key,
            "filesize": media.file_size,
        },
        "source_url": media.url,
        "_links": {
            "self": _href(api_url(base, f"media/{media.id}")),
            "collection": _href(api_url(base, "media")),
            "about": _href(api_url(base, "types/attachment")),
            "author": _href(api_url(base, f"users/{media.author_id}"), embeddable=True),
            "replies": _href(api_url(base, f"comments?post={media.id}"), embeddable=True),
        },
    }


# --- Users -----------------------------------------------------------------

def format_user(user: User, base_url: str, is_admin: bool = False) -> Dict[str, Any]:
    """
    `is_admin` means the viewer may see private fields: an administrator or
    editor, or the user themself.
    """
    base = normalize_base_url(base_url)
    data = {
        "id": user.id,
        "name": user.display_name or user.username,
        "url": "",
        "description": user.bio or "",
        "link": f"{base}/author/{user.username}",
        "slug": user.username,
        "avatar_urls": avatar_urls(user.email, user.avatar_url),
        "roles": [user.role],
        "role": user.role,
        "meta": [],
        "_links": {
            "self": _href(api_url(base, f"users/{user.id}")),
            "collection": _href(api_url(base, "users")),
        },
    }
    if is_admin:
        data["email"] = user.email
        data["username"] = user.username
        data["registered_date"] = format_datetime(user.registered_at)
        data["status"] = user.status
    return data


# --- Comments --------------------------------------------------------------

def format_comment(comment: Comment, base_url: str, is_admin: bool = False,
                   post_title: Optional[str] = None) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    date = format_datetime(comment.created_at)
    links = {
        "self": _href(api_url(base, f"comments/{comment.id}")),
        "collection": _href(api_url(base, "comments")),
        "up": _href(api_url(base, f"posts/{comment.post_id}"), embeddable=True, post_type="post"),
    }
    if comment.parent_id:
        links["in-reply-to"] = _href(api_url(base, f"comments/{comment.parent_id}"), embeddable=True)
    if comment.user_id:
        links["author"] = _href(api_url(base, f"users/{comment.user_id}"), embeddable=True)

    data = {
        "id": comment.id,
        "post": comment.post_id,
        "parent": comment.parent_id or 0,
        "author": comment.user_id or 0,
        "author_name": comment.author_name,
        "author_url": comment.author_url or "",
        "date": date,
        "date_gmt": date,
        "content": {"rendered": comment.content},
        "link": f"{base}/?p={comment.post_id}#comment-{comment.id}",
        "status": comment.status,
        "type": "comment",
        "author_avatar_urls": avatar_urls(comment.author_email),
        "meta": [],
        "_links": links,
    }
    if post_title is not None:
        data["post_title"] = post_title
    if is_admin:
        data["author_email"] = comment.author_email
        data["author_ip"] = comment.author_ip or ""
    return data


# --- Links -----------------------------------------------------------------

def format_link_category(category: LinkCategory, base_url: str) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description or "",
        "count": category.count or 0,
        "_links": {
            "self": _href(api_url(base, f"link-categories/{category.id}")),
            "collection": _href(api_url(base, "link-categories")),
        },
    }


def format_link(link: Link, base_url: str) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    category = link.category
    return {
        "id": link.id,
        "name": link.name,
        "url": link.url,
        "description": link.description or "",
        "avatar": link.avatar or "",
        "category": {
            "id": category.id,
            "name": category.name,
            "slug": category.slug,
        } if category is not None else None,
        "target": link.target,
        "visible": link.visible,
        "rating": link.rating or 0,
        "sort_order": link.sort_order or 0,
        "created_at": format_datetime(link.created_at),
        "updated_at": format_datetime(link.updated_at),
        "_links": {
            "self": _href(api_url(base, f"links/{link.id}")),
            "collection": _href(api_url(base, "links")),
        },
    }


# --- Moments ---------------------------------------------------------------

def format_moment(moment: Moment, base_url: str) -> Dict[str, Any]:
    base = normalize_base_url(base_url)
    author = moment.author
    created = format_datetime(moment.created_at)
    modified = format_datetime(moment.updated_at)
    return {
        "id": moment.id,
        "content": {"rendered": moment.content, "raw": moment.content},
        "author": moment.author_id,
        "author_name": (author.display_name or author.username) if author else "",
        "author_avatar": avatar_urls(author.email, author.avatar_url)["96"] if author else "",
        "status": moment.status,
        "media_urls": list(moment.media_urls or []),
        "view_count": moment.view_count or 0,
        "like_count": moment.like_count or 0,
        "comment_count": moment.comment_count or 0,
        "date": created,
        "date_gmt": created,
        "modified": modified,
        "modified_gmt": modified,
        "_links": {
            "self": _href(api_url(base, f"moments/{moment.id}")),
            "author": _href(api_url(base, f"users/{moment.author_id}"), embeddable=True),
        },
    }
