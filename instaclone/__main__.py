import uvicorn

from .core import HOST, PORT


def main():
    uvicorn.run('instaclone.main:app', host=HOST, port=PORT)


if __name__ == '__main__':
    main()
