"""Lambda entry points (``gitsnap.lambdas.<name>.lambda_handler``)."""
