from app.auth import get_password_hash
from app.database import SessionLocal, engine, Base
from app.dependencies import BlogCore
from app.models import Blog, Comment, Like, User
from app.services import Actor, BlogDraft

# Create tables
Base.metadata.create_all(bind=engine)

db = SessionLocal()

# Clear existing data
db.query(Like).delete()
db.query(Comment).delete()
db.query(Blog).delete()
db.query(User).delete()
db.commit()

# Sample users
admin = User(
    email="admin@inkpost.dev",
    hashed_password=get_password_hash("admin12345"),
    display_name="Inkpost Admin",
    role="admin",
)
authors = [
    User(
        email="ada@inkpost.dev",
        hashed_password=get_password_hash("password123"),
        display_name="Ada",
    ),
    User(
        email="linus@inkpost.dev",
        hashed_password=get_password_hash("password123"),
        display_name="Linus",
    ),
]
db.add(admin)
db.add_all(authors)
db.commit()
for user in [admin] + authors:
    db.refresh(user)

core = BlogCore(db)
admin_actor = Actor(id=admin.id, role="admin")

# Sample blogs, created and moderated through the same workflow the API uses
drafts = [
    (authors[0], BlogDraft(
        title="Getting Started with FastAPI",
        content="FastAPI builds on Starlette and pydantic. " * 20,
        tags=["python", "fastapi"],
        category="Web Development",
        status="pending",
    ), "approved"),
    (authors[0], BlogDraft(
        title="SQLAlchemy Sessions Explained",
        content="A session is a unit of work over a connection. " * 30,
        tags=["python", "database"],
        category="Database",
        status="pending",
    ), "approved"),
    (authors[1], BlogDraft(
        title="Why I Rewrote Everything in Rust",
        content="It started with a segfault on a Friday evening. " * 15,
        tags=["rust"],
        category="Opinion",
        status="pending",
    ), "rejected"),
    (authors[1], BlogDraft(
        title="Notes on Kernel Scheduling",
        content="Scheduling is about deciding who runs next and for how long. " * 10,
        tags=["linux"],
        category="Technology",
    ), None),
]

blogs = []
for author, draft, decision in drafts:
    blog = core.workflow.create_blog(Actor(id=author.id), draft)
    if decision == "approved":
        blog = core.workflow.review_blog(blog.id, admin_actor, "approved")
    elif decision == "rejected":
        blog = core.workflow.review_blog(
            blog.id, admin_actor, "rejected", "Please back the claims with benchmarks."
        )
    blogs.append(blog)

# Some engagement on the first published post
published = blogs[0]
core.workflow.toggle_featured(published.id, admin_actor)
first = core.comments.add_comment(published.id, Actor(id=authors[1].id), "Clear and to the point, thanks!")
core.comments.add_comment(published.id, Actor(id=authors[0].id), "Glad it helped.", parent_id=first.id)
core.likes.toggle_like(published.id, Actor(id=authors[1].id), "insightful")
core.likes.toggle_like(published.id, admin_actor)
for _ in range(25):
    core.workflow.increment_view(published.id)

print("Database seeded successfully!")
print(f"  - {1 + len(authors)} users (admin: {admin.email})")
print(f"  - {len(blogs)} blogs")
print(f"  - Trending score of '{published.title}': {published.trending_score:.2f}")

db.close()
