import time
import logging
from pathlib import Path

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

from blog_posts.config.shared_constants import POST_EXTENSIONS
from blog_posts.services.linter import PostLinter

logger = logging.getLogger(__name__)


def wait_until_ready(file_path: Path, timeout=10, interval=0.5) -> bool:
    """Wait until the file stops growing in size."""
    start = time.time()
    last_size = -1
    while time.time() - start < timeout:
        try:
            current_size = file_path.stat().st_size
            if current_size == last_size:
                return True
            last_size = current_size
            time.sleep(interval)
        except FileNotFoundError:
            time.sleep(interval)
    return False


class PostLintHandler(FileSystemEventHandler):
    def __init__(self, linter: PostLinter, extensions=POST_EXTENSIONS, timeout=10):
        super().__init__()
        self.linter = linter
        self.extensions = {ext.lower() for ext in extensions}
        self.timeout = timeout
        # path -> modification time of the last lint
        self._checked = {}

    def _is_post(self, event) -> bool:
        return not event.is_directory and Path(event.src_path).suffix.lower() in self.extensions

    def on_created(self, event):
        if self._is_post(event):
            self.check(Path(event.src_path))

    def on_modified(self, event):
        if self._is_post(event):
            self.check(Path(event.src_path))

    def check(self, path: Path):
        """Lint one post once it is fully written, returning its issues."""
        if not wait_until_ready(path, timeout=self.timeout):
            logger.warning(f"⚠️ File never stabilized: {path.name}")
            return None

        try:
            mtime = path.stat().st_mtime_ns
        except FileNotFoundError:
            return None
        if self._checked.get(path) == mtime:
            logger.debug(f"Already checked {path.name}")
            return None
        self._checked[path] = mtime

        issues = self.linter.lint_file(path)
        if not issues:
            logger.info(f"✅ {path.name} is clean")
        for issue in issues:
            if issue.severity == "error":
                logger.error(f"❌ {issue}")
            else:
                logger.warning(f"⚠️ {issue}")
        return issues


def watch(posts_dir, linter: PostLinter, extensions=POST_EXTENSIONS):
    posts_dir = Path(posts_dir)
    if not posts_dir.is_dir():
        raise FileNotFoundError(f"Posts directory not found: {posts_dir}")

    logger.info(f"👀 Watching folder: {posts_dir}")

    event_handler = PostLintHandler(linter, extensions)
    observer = Observer()
    observer.schedule(event_handler, path=str(posts_dir), recursive=True)
    observer.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        observer.stop()
        logger.info("👋 Stopped watching.")
    observer.join()
