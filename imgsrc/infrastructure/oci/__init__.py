from imgsrc.infrastructure.oci.di import OciProvider

__all__ = ["OciProvider"]
