from rmake.main import rmake

rmake()
