import logging

blob_logger = logging.getLogger("formdata.blob")
multipart_logger = logging.getLogger("formdata.multipart")
