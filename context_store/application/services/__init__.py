from .code_search import CodeFragment, CodeSearchHit, CodeSearchService

__all__ = ["CodeFragment", "CodeSearchHit", "CodeSearchService"]
