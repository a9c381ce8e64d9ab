"""
Locate the bookmark folder that holds the user's collections.

Strategies, first hit wins:
  1. Title search for the folder name, first result without a url
  2. Walk the children of every top-level container
  3. Look inside the container that is most likely "Other Bookmarks"
     (id "2", or a title mentioning "other" / "bookmark")

Not finding the folder is a normal outcome and returns None.
"""

import logging
from typing import Optional

from ..providers.base import BookmarkNode
from ..providers.browser import BrowserAPI, ROOT_BOOKMARK_ID

logger = logging.getLogger(__name__)


DEFAULT_FOLDER_TITLE = "Arcify"
OTHER_BOOKMARKS_ID = "2"


class CollectionLocator:
    def __init__(self, browser: BrowserAPI, folder_title: str = DEFAULT_FOLDER_TITLE):
        self.browser = browser
        self.folder_title = folder_title

    async def find_root(self) -> Optional[BookmarkNode]:
        """Return the collection root folder, or None when it does not exist."""
        folder = await self._by_title_search()
        if folder:
            logger.debug(f"Collection root found via search: {folder.id}")
            return folder

        top_level = await self.browser.get_bookmark_children(ROOT_BOOKMARK_ID)

        folder = await self._by_tree_walk(top_level)
        if folder:
            logger.debug(f"Collection root found via tree walk: {folder.id}")
            return folder

        folder = await self._in_other_bookmarks(top_level)
        if folder:
            logger.debug(f"Collection root found in other bookmarks: {folder.id}")
            return folder

        logger.info(f"No '{self.folder_title}' bookmark folder found")
        return None

    async def _by_title_search(self) -> Optional[BookmarkNode]:
        try:
            results = await self.browser.find_bookmarks_by_title(self.folder_title)
        except Exception as e:
            logger.warning(f"Bookmark title search failed: {e}")
            return None
        return next((node for node in results if node.is_folder), None)

    def _pick(self, children) -> Optional[BookmarkNode]:
        return next(
            (child for child in children if child.title == self.folder_title and child.is_folder),
            None,
        )

    async def _by_tree_walk(self, top_level) -> Optional[BookmarkNode]:
        for container in top_level:
            try:
                children = await self.browser.get_bookmark_children(container.id)
            except Exception as e:
                logger.warning(f"Error checking folder {container.title}: {e}")
                continue
            folder = self._pick(children)
            if folder:
                return folder
        return None

    async def _in_other_bookmarks(self, top_level) -> Optional[BookmarkNode]:
        other = next(
            (
                container for container in top_level
                if container.id == OTHER_BOOKMARKS_ID
                or 'other' in container.title.lower()
                or 'bookmark' in container.title.lower()
            ),
            None,
        )
        if other is None:
            return None
        children = await self.browser.get_bookmark_children(other.id)
        return self._pick(children)
