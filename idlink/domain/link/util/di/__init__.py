from idlink.domain.link.util.di.provider import LinkProvider

__all__ = ["LinkProvider"]
